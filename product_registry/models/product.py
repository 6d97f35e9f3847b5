# models/product.py
from dataclasses import dataclass, replace
from typing import Dict, Any, Optional

from product_registry.models.enums import ProductStatus, Role, TransitionType


def product_reference(product_id: int) -> str:
    """Scannable reference URI for a product"""
    return f"/product/{int(product_id):d}"


@dataclass(frozen=True)
class Caller:
    """Authenticated caller as handed over by the identity provider"""
    identity: str
    role: str

    @property
    def registry_role(self) -> Optional[Role]:
        return Role.parse(self.role)


@dataclass(frozen=True)
class Product:
    """Product record tracked by the registry"""
    id: int
    batch_id: str
    certification: str
    origin: str
    created_at: int
    owner: str
    status: ProductStatus = ProductStatus.CREATED

    def with_status(self, status: ProductStatus) -> "Product":
        return replace(self, status=status)

    @property
    def reference(self) -> str:
        return product_reference(self.id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape returned by the API"""
        return {
            "id": self.id,
            "batch_id": self.batch_id,
            "certification": self.certification,
            "origin": self.origin,
            "created_at": self.created_at,
            "owner": self.owner,
            "status": self.status.label,
            "status_code": int(self.status),
            "reference": self.reference
        }

    def to_document(self) -> Dict[str, Any]:
        """Convert to a MongoDB document"""
        return {
            "_id": self.id,
            "batch_id": self.batch_id,
            "certification": self.certification,
            "origin": self.origin,
            "created_at": self.created_at,
            "owner": self.owner,
            "status": self.status.name
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Product":
        return cls(
            id=int(doc["_id"]),
            batch_id=doc["batch_id"],
            certification=doc["certification"],
            origin=doc["origin"],
            created_at=int(doc["created_at"]),
            owner=doc["owner"],
            status=ProductStatus[doc["status"]]
        )


@dataclass(frozen=True)
class TransitionEvent:
    """Published to listeners after a transition commits"""
    product_id: int
    transition: TransitionType
    previous_status: Optional[ProductStatus]
    status: ProductStatus
    caller: Caller
