# tests/unit/test_validators.py
import pytest

from product_registry.core.exceptions import ValidationError
from product_registry.models.enums import ProductStatus, Role
from product_registry.models.product import Product, product_reference
from product_registry.validators.product_validator import ProductValidator


def valid_data(**overrides):
    data = {'batch_id': 'B789', 'certification': 'Organic', 'origin': 'Farm X', 'timestamp': 1700000000}
    data.update(overrides)
    return data


def test_valid_product_data():
    assert ProductValidator.validate_product_data(valid_data()) is None


def test_missing_fields_are_named():
    assert ProductValidator.validate_product_data(valid_data(origin='')) == "origin is required"
    assert ProductValidator.validate_product_data({}) == "Product data is required"


def test_overlong_field():
    message = ProductValidator.validate_product_data(valid_data(batch_id='x' * 300))
    assert "cannot exceed" in message


def test_parse_product_id():
    assert ProductValidator.parse_product_id(5) == 5
    assert ProductValidator.parse_product_id(" 12 ") == 12
    with pytest.raises(ValidationError):
        ProductValidator.parse_product_id("0")
    with pytest.raises(ValidationError):
        ProductValidator.parse_product_id("-1")


def test_product_reference_is_plain_decimal():
    assert product_reference(1) == "/product/1"
    assert product_reference(1000000) == "/product/1000000"


def test_product_wire_shape():
    product = Product(id=1, batch_id="B789", certification="Organic", origin="Farm X",
                      created_at=1700000000, owner="maker-1")
    assert product.to_dict() == {
        "id": 1,
        "batch_id": "B789",
        "certification": "Organic",
        "origin": "Farm X",
        "created_at": 1700000000,
        "owner": "maker-1",
        "status": "Created",
        "status_code": 0,
        "reference": "/product/1"
    }


def test_document_round_trip():
    product = Product(id=4, batch_id="B", certification="C", origin="O",
                      created_at=10, owner="m", status=ProductStatus.VERIFIED)
    doc = product.to_document()
    assert doc['_id'] == 4
    assert doc['status'] == 'VERIFIED'
    assert Product.from_document(doc) == product


def test_status_is_ordinal():
    assert ProductStatus.CREATED < ProductStatus.VERIFIED < ProductStatus.FINALIZED
    assert ProductStatus.from_label("Verified") is ProductStatus.VERIFIED


def test_role_parse():
    assert Role.parse("Distributor") is Role.DISTRIBUTOR
    assert Role.parse("manager") is None
