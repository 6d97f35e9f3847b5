#validators/product_validator.py
"""
Product Validation
Input validation for registry operations
"""

from typing import Optional, Dict, Any
import re

from product_registry.core.exceptions import ValidationError

REQUIRED_STRING_FIELDS = ('batch_id', 'certification', 'origin')
MAX_FIELD_LENGTH = 256
# largest id a BSON int64 can hold
MAX_PRODUCT_ID = 2 ** 63 - 1

_DECIMAL_ID = re.compile(r'^[0-9]+$')


class ProductValidator:
    """Validator for product-related operations"""

    @staticmethod
    def validate_product_data(product_data: Dict[str, Any]) -> Optional[str]:
        """
        Validate product data for creation

        Args:
            product_data: dict with batch_id, certification, origin, timestamp

        Returns:
            Error message if validation fails, None if valid
        """
        if not product_data:
            return "Product data is required"

        for field in REQUIRED_STRING_FIELDS:
            value = product_data.get(field)
            if not isinstance(value, str) or not value.strip():
                return f"{field} is required"
            if len(value) > MAX_FIELD_LENGTH:
                return f"{field} cannot exceed {MAX_FIELD_LENGTH} characters"

        timestamp = product_data.get('timestamp')
        # bool is an int subclass
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            return "timestamp must be an integer number of seconds"
        if timestamp < 0:
            return "timestamp cannot be negative"

        return None

    @staticmethod
    def validate_product_id(product_id: Any) -> Optional[str]:
        """
        Validate a product id

        Accepts ints and plain decimal strings (as found in URLs)
        """
        if isinstance(product_id, bool):
            return "Product ID must be an integer"
        if isinstance(product_id, str):
            if not _DECIMAL_ID.match(product_id.strip()):
                return "Product ID must be an integer"
            product_id = int(product_id.strip())
        if not isinstance(product_id, int):
            return "Product ID must be an integer"
        if product_id <= 0:
            return "Product ID must be positive"
        if product_id > MAX_PRODUCT_ID:
            return "Product ID out of range"
        return None

    @staticmethod
    def parse_product_id(product_id: Any) -> int:
        """Validate and return the id as int, raising ValidationError otherwise"""
        error = ProductValidator.validate_product_id(product_id)
        if error:
            raise ValidationError(error)
        return int(product_id.strip()) if isinstance(product_id, str) else product_id

    @staticmethod
    def require_product_data(product_data: Dict[str, Any]) -> None:
        error = ProductValidator.validate_product_data(product_data)
        if error:
            raise ValidationError(error)

