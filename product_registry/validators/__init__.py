"""
Validators Module
Input validation for registry operations
"""

from .product_validator import ProductValidator

__all__ = [
    'ProductValidator'
]
