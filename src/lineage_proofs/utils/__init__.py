"""
Utility Functions

This package provides helpers for hex string handling and naming conventions
used when reading record files and talking to external services.
"""

from .hex_helpers import (
    normalize_hex,
    camel_to_snake,
    validate_hex_length,
)

__all__ = [
    'normalize_hex',
    'camel_to_snake',
    'validate_hex_length',
]
