"""
Hex String and Naming Convention Utilities

This module provides utilities for handling hex strings and converting between
the camelCase keys used by record exports and Python attribute names.
"""

import re
from typing import Optional

_HEX_DIGITS = set("0123456789abcdefABCDEF")


def normalize_hex(hex_str: str, expected_bytes: Optional[int] = None) -> str:
    """
    Normalize a 0x-prefixed hex string to lowercase with an even digit count.

    Args:
        hex_str: The hex string to normalize (must start with '0x')
        expected_bytes: Optional exact byte length to enforce

    Returns:
        Normalized hex string

    Raises:
        ValueError: If the string is not 0x-prefixed hex or has the wrong length

    Examples:
        >>> normalize_hex("0x123")
        '0x0123'
        >>> normalize_hex("0xABcd")
        '0xabcd'
    """
    if not isinstance(hex_str, str) or not hex_str.startswith("0x"):
        raise ValueError(f"Hex string must start with '0x': {hex_str!r}")

    hex_part = hex_str[2:]
    if not hex_part or not all(c in _HEX_DIGITS for c in hex_part):
        raise ValueError(f"Invalid hex string: {hex_str}")

    if len(hex_part) % 2 == 1:
        hex_part = "0" + hex_part

    if expected_bytes is not None:
        actual_bytes = len(hex_part) // 2
        if actual_bytes != expected_bytes:
            raise ValueError(f"Expected {expected_bytes} bytes, got {actual_bytes} bytes")

    return "0x" + hex_part.lower()


def camel_to_snake(name: str) -> str:
    """
    Convert camelCase naming to snake_case naming.

    Record exports use camelCase keys (``citizenId``, ``parentFamilyId``);
    the loader works on snake_case.

    Examples:
        >>> camel_to_snake("parentFamilyId")
        'parent_family_id'
        >>> camel_to_snake("snake_case")
        'snake_case'
    """
    name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", name).lower()


def validate_hex_length(hex_str: str, expected_bytes: int) -> bool:
    """
    Check that a string is 0x-prefixed hex of exactly ``expected_bytes`` bytes.

    Returns:
        True if the hex string has the correct prefix, digits and length
    """
    if not isinstance(hex_str, str) or not hex_str.startswith("0x"):
        return False

    hex_part = hex_str[2:]
    if len(hex_part) != expected_bytes * 2:
        return False

    return all(c in _HEX_DIGITS for c in hex_part)
