"""
Field Element Encoding

A field element is a plain ``int`` in ``[0, FIELD_MODULUS)``. Its canonical
external form is ``0x`` followed by 64 lowercase hex digits (big-endian).

The string encoder must stay byte-for-byte identical to the one inside the
proving circuit: SHA-256 over the UTF-8 bytes, read big-endian, reduced mod p.
"""

from hashlib import sha256
from typing import Union

from ..constants import FIELD_ELEMENT_BYTES, FIELD_MODULUS
from ..errors import InvalidInputError
from ..utils import normalize_hex, validate_hex_length

FieldElement = int


def encode(s: str) -> FieldElement:
    """
    Encode a record identifier as a field element.

    Args:
        s: Non-empty identifier string

    Returns:
        sha256(utf8(s)) as a big-endian integer, reduced modulo the field prime

    Raises:
        InvalidInputError: If ``s`` is empty or not a string
    """
    if not isinstance(s, str):
        raise InvalidInputError(f"Field encoder expects a string, got {type(s).__name__}")
    if s == "":
        raise InvalidInputError("Field encoder refuses the empty string")

    digest = sha256(s.encode("utf-8")).digest()
    return int.from_bytes(digest, "big") % FIELD_MODULUS


def to_field_element(value: Union[int, str, bytes]) -> FieldElement:
    """
    Coerce an int, 0x-hex string or 32-byte big-endian value to a field element.

    Hex strings are accepted in any case and need not be zero padded. The value
    must already be canonical: nothing is reduced here.

    Raises:
        InvalidInputError: If the value is malformed, negative or not below p
    """
    if isinstance(value, bool):
        raise InvalidInputError("Booleans are not field elements")

    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        try:
            result = int(normalize_hex(value), 16)
        except ValueError as e:
            raise InvalidInputError(f"Malformed field element hex: {e}") from e
    elif isinstance(value, (bytes, bytearray)):
        if len(value) != FIELD_ELEMENT_BYTES:
            raise InvalidInputError(
                f"Field element bytes must be {FIELD_ELEMENT_BYTES} long, got {len(value)}"
            )
        result = int.from_bytes(value, "big")
    else:
        raise InvalidInputError(f"Cannot interpret {type(value).__name__} as a field element")

    if result < 0 or result >= FIELD_MODULUS:
        raise InvalidInputError(f"Value {hex(result)} is outside the field")
    return result


def to_hex32(value: FieldElement) -> str:
    """Render a field element as ``0x`` + 64 lowercase hex digits."""
    element = to_field_element(value)
    return "0x" + format(element, "064x")


def from_hex32(hex_str: str) -> FieldElement:
    """
    Parse a strict hex32 string (0x + exactly 64 hex digits, any case).

    Raises:
        InvalidInputError: If the string is not strict hex32 or not below p
    """
    if not is_hex32(hex_str, strict_case=False):
        raise InvalidInputError(f"{hex_str!r} is not a 32-byte hex string")
    return to_field_element(hex_str)


def is_hex32(value: object, strict_case: bool = True) -> bool:
    """
    Check the wire format of a field element.

    With ``strict_case`` only lowercase digits are accepted, which is what
    the proving service payload requires.
    """
    if not isinstance(value, str) or not validate_hex_length(value, FIELD_ELEMENT_BYTES):
        return False
    if strict_case and value != value.lower():
        return False
    return True


def to_bytes32(value: FieldElement) -> bytes:
    """Big-endian 32-byte representation of a field element."""
    return to_field_element(value).to_bytes(FIELD_ELEMENT_BYTES, "big")
