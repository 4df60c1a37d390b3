"""
Field Encoder

Maps record identifiers onto elements of the circuit's prime field and
converts field elements to and from their canonical 32-byte hex form.
"""

from .encoding import (
    FieldElement,
    encode,
    to_field_element,
    to_hex32,
    from_hex32,
    is_hex32,
    to_bytes32,
)

__all__ = [
    "FieldElement",
    "encode",
    "to_field_element",
    "to_hex32",
    "from_hex32",
    "is_hex32",
    "to_bytes32",
]
