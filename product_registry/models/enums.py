# models/enums.py
from enum import Enum, IntEnum


class Role(Enum):
    MANUFACTURER = "manufacturer"
    DISTRIBUTOR = "distributor"
    RETAILER = "retailer"

    @classmethod
    def parse(cls, value):
        """Return the Role for value, or None for roles the registry does not know"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class ProductStatus(IntEnum):
    """Ordinal lifecycle status, encoded 0/1/2 like the contract does"""
    CREATED = 0
    VERIFIED = 1
    FINALIZED = 2

    @property
    def label(self):
        return self.name.capitalize()

    @classmethod
    def from_label(cls, label):
        return cls[str(label).upper()]


class TransitionType(Enum):
    CREATE = "create"
    VERIFY = "verify"
    FINALIZE = "finalize"


class HandleState(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class RegistryBackend(Enum):
    MEMORY = "memory"
    MONGO = "mongo"
    CONTRACT = "contract"
