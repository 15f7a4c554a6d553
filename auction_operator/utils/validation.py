"""
Input Validation - Sanitization of operator inputs.

Checks every value that crosses into a contract call or comes out of the
environment:
- Addresses and private keys
- bytes32 proof hashes
- uint256 token ids and prices
"""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple

# =============================================================================
# Constants
# =============================================================================

ADDRESS_SIZE = 20
HASH_SIZE = 32
PRIVATE_KEY_SIZE = 32

MIN_UINT = 0
MAX_UINT256 = 2**256 - 1

MAX_TOKEN_DECIMALS = 36

_HEX_RE = re.compile(r"^(0x)?[0-9a-fA-F]*$")


# =============================================================================
# Validation Functions
# =============================================================================


def validate_hex(
    value: Any,
    name: str,
    expected_bytes: Optional[int] = None,
) -> Tuple[bool, str]:
    """
    Validate a hex string, optionally of an exact byte length.

    Args:
        value: String to validate
        name: Field name for error messages
        expected_bytes: Exact decoded length

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, f"{name} must be a hex string, got {type(value).__name__}"

    if not _HEX_RE.match(value):
        return False, f"{name} is not valid hex"

    digits = value[2:] if value.startswith("0x") else value
    if len(digits) % 2 != 0:
        return False, f"{name} has an odd number of hex digits"

    if expected_bytes is not None and len(digits) != expected_bytes * 2:
        return False, f"{name} must be {expected_bytes} bytes, got {len(digits) // 2}"

    return True, ""


def validate_address(address: Any, name: str = "address") -> Tuple[bool, str]:
    """Validate a 0x-prefixed 20-byte address."""
    if isinstance(address, str) and not address.startswith("0x"):
        return False, f"{name} must start with 0x"
    return validate_hex(address, name, expected_bytes=ADDRESS_SIZE)


def validate_private_key(key: Any) -> Tuple[bool, str]:
    """Validate a 32-byte private key (0x prefix optional)."""
    return validate_hex(key, "private_key", expected_bytes=PRIVATE_KEY_SIZE)


def validate_proof_hash(proof_hash: Any) -> Tuple[bool, str]:
    """Validate a bytes32 proof hash."""
    if not isinstance(proof_hash, (bytes, bytearray)):
        return False, f"proof_hash must be bytes, got {type(proof_hash).__name__}"
    if len(proof_hash) != HASH_SIZE:
        return False, f"proof_hash must be {HASH_SIZE} bytes, got {len(proof_hash)}"
    return True, ""


def validate_uint(
    value: Any,
    name: str,
    min_val: int = MIN_UINT,
    max_val: int = MAX_UINT256,
) -> Tuple[bool, str]:
    """
    Validate integer within uint256 bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_price(value: Any, name: str = "price") -> Tuple[bool, str]:
    """Validate a non-negative decimal price in token units."""
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return False, f"{name} is not a number: {value!r}"

    if not price.is_finite():
        return False, f"{name} must be finite"

    if price < 0:
        return False, f"{name} must be >= 0, got {price}"

    return True, ""


def validate_positive_number(value: Any, name: str) -> Tuple[bool, str]:
    """Validate a strictly positive, finite int or float (intervals, timeouts)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False, f"{name} must be a number, got {type(value).__name__}"
    if isinstance(value, float) and not math.isfinite(value):
        return False, f"{name} must be finite, got {value}"
    if value <= 0:
        return False, f"{name} must be > 0, got {value}"
    return True, ""


def parse_hex_bytes(value: str) -> bytes:
    """Decode a hex string with or without 0x prefix."""
    digits = value[2:] if value.startswith("0x") else value
    return bytes.fromhex(digits)
