"""
Wallet Keys - secp256k1 private keys and Ethereum addresses.

- Validity checking against the curve order
- Random key generation (single attempt, no retry)
- Address derivation with EIP-55 checksum casing

Curve arithmetic comes from eth-keys; the checksum casing is computed here
so it can be checked against any other EIP-55 implementation.
"""

import asyncio
import logging
import secrets
from typing import Callable, Optional

from eth_keys import keys as eth_keys
from eth_keys.exceptions import ValidationError
from eth_utils import keccak

from errors import ErrorKind, IdentityError

logger = logging.getLogger(__name__)


# ============================================
# Curve Constants
# ============================================

# Order of the secp256k1 base point
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

PRIVATE_KEY_SIZE = 32
ADDRESS_HEX_LENGTH = 40
HEX_PREFIX = "0x"


# ============================================
# Hex Helpers
# ============================================

def strip_hex_prefix(value: str) -> str:
    """Remove a leading 0x/0X if present."""
    value = value.strip()
    if value.startswith("0x") or value.startswith("0X"):
        return value[2:]
    return value


def add_hex_prefix(value: str) -> str:
    """Add the 0x prefix if missing."""
    return HEX_PREFIX + strip_hex_prefix(value)


def private_key_bytes(private_key_hex: str) -> bytes:
    """
    Decode a hex private key (with or without 0x) to bytes.

    Raises: IdentityError(INVALID_PRIVATE_KEY) on malformed hex.
    """
    try:
        return bytes.fromhex(strip_hex_prefix(private_key_hex))
    except (ValueError, TypeError, AttributeError) as e:
        raise IdentityError(ErrorKind.INVALID_PRIVATE_KEY,
                            "Private key is not a hex string") from e


# ============================================
# Key Validation
# ============================================

def is_valid_private_key(candidate: bytes) -> bool:
    """True iff candidate is 32 bytes, nonzero and below the curve order."""
    if not isinstance(candidate, (bytes, bytearray)) or len(candidate) != PRIVATE_KEY_SIZE:
        return False
    scalar = int.from_bytes(candidate, "big")
    return 0 < scalar < SECP256K1_N


class EthKeysCurve:
    """
    Elliptic-curve operations backed by eth-keys.

    KeyVault and derive_address take any object with these methods, so
    tests can substitute their own.
    """

    def is_valid_private_key(self, candidate: bytes) -> bool:
        if not is_valid_private_key(candidate):
            return False
        try:
            eth_keys.PrivateKey(bytes(candidate))
        except (ValidationError, ValueError):
            return False
        return True

    def private_to_address(self, private_key: bytes) -> bytes:
        """20-byte address: last 20 bytes of keccak256(public key)."""
        public_key = eth_keys.PrivateKey(private_key).public_key
        return keccak(public_key.to_bytes())[-20:]

    def private_to_public_key(self, private_key: bytes, compressed: bool = True) -> bytes:
        public_key = eth_keys.PrivateKey(private_key).public_key
        if compressed:
            return public_key.to_compressed_bytes()
        return public_key.to_bytes()

    def add_hex_prefix(self, value: str) -> str:
        return add_hex_prefix(value)


default_curve = EthKeysCurve()


# ============================================
# Key Generation
# ============================================

class KeyGenerator:
    """
    Produces one random private key per call.

    An invalid candidate is reported, not retried; retry policy belongs to
    the caller.
    """

    def __init__(self, entropy: Optional[Callable[[int], bytes]] = None,
                 validator: Callable[[bytes], bool] = is_valid_private_key):
        self._entropy = entropy or secrets.token_bytes
        self._validator = validator

    async def generate(self) -> str:
        """
        Generate a private key.

        Returns:
            64 lowercase hex characters, no prefix

        Raises:
            OSError: the entropy source failed
            IdentityError(INVALID_PRIVATE_KEY): the candidate is not a valid key
        """
        try:
            candidate = await asyncio.to_thread(self._entropy, PRIVATE_KEY_SIZE)
        except OSError:
            raise
        except Exception as e:
            raise OSError(f"Entropy source failed: {e}") from e

        if not self._validator(candidate):
            raise IdentityError(ErrorKind.INVALID_PRIVATE_KEY,
                                "Generated candidate is not a valid private key")

        return bytes(candidate).hex()


async def generate_private_key() -> str:
    """Generate a private key from the system CSPRNG."""
    return await KeyGenerator().generate()


# ============================================
# Address Derivation
# ============================================

def to_checksum_address(address: str) -> str:
    """
    Apply EIP-55 mixed-case checksum encoding to a 20-byte hex address.

    Hex letter i is upper-cased iff nibble i of keccak256(lowercase hex
    address, as ASCII) is >= 8.
    """
    hex_address = strip_hex_prefix(address).lower()
    if len(hex_address) != ADDRESS_HEX_LENGTH:
        raise ValueError(f"Address must be {ADDRESS_HEX_LENGTH} hex characters")
    try:
        bytes.fromhex(hex_address)
    except ValueError as e:
        raise ValueError("Address is not a hex string") from e

    digest = keccak(text=hex_address).hex()
    return HEX_PREFIX + "".join(
        char.upper() if int(digest[i], 16) >= 8 else char
        for i, char in enumerate(hex_address)
    )


def derive_address(private_key_hex: str, curve=None) -> str:
    """
    Derive the checksummed address of a private key.

    Args:
        private_key_hex: Hex private key (with or without 0x prefix)
        curve: Elliptic-curve collaborator (default: eth-keys)
    """
    curve = curve or default_curve
    raw_address = curve.private_to_address(private_key_bytes(private_key_hex))
    return to_checksum_address(bytes(raw_address).hex())


def derive_public_key(private_key_hex: str, compressed: bool = True, curve=None) -> str:
    """Hex public key: 33 bytes compressed or 64 bytes uncompressed."""
    curve = curve or default_curve
    public_key = curve.private_to_public_key(private_key_bytes(private_key_hex), compressed)
    return bytes(public_key).hex()
