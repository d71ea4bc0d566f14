"""
Key Vault - Validated, optionally password-protected key records.

Records live in secure storage under PRIVATE_ETH_KEY#<checksummed address>.
The address always comes from the unencrypted key, so a record can be
found by its public identity whether or not it is encrypted.
"""

import re
import logging
from typing import Optional

from argon2.exceptions import HashingError
from cryptography.exceptions import InvalidTag
from eth_account import Account
from eth_account.signers.local import LocalAccount

from errors import ErrorKind, IdentityError
from .crypto import CipherEnvelope, SymmetricCipher
from .keys import (
    KeyGenerator,
    default_curve,
    derive_address,
    private_key_bytes,
    to_checksum_address,
)
from .storage import require_capability

logger = logging.getLogger(__name__)

PRIVATE_ETH_KEY_PREFIX = "PRIVATE_ETH_KEY#"

# Form of an unencrypted record: 0x + 32 bytes of hex
_PLAINTEXT_KEY = re.compile(r"0x[0-9a-fA-F]{64}")


def storage_key_for(address: str) -> str:
    """Storage key of the record belonging to a checksummed address."""
    return PRIVATE_ETH_KEY_PREFIX + address


def is_plaintext_key(value: str) -> bool:
    """True iff value is an unencrypted record: 0x plus 64 hex digits."""
    return _PLAINTEXT_KEY.fullmatch(value) is not None


def wants_encryption(password: Optional[str], password_confirm: Optional[str]) -> bool:
    """
    Decide whether a key is stored encrypted.

    Both None means no protection. Anything else must be two equal strings,
    and two empty strings mean "encrypt with an empty password".

    Raises: IdentityError(PASSWORD_MISMATCH)
    """
    if password is None and password_confirm is None:
        return False
    if password is None or password_confirm is None or password != password_confirm:
        raise IdentityError(ErrorKind.PASSWORD_MISMATCH)
    return True


class KeyVault:
    """
    Stores private keys in a secure storage backend.

    Usage:
        vault = KeyVault(FileSecureStorage(get_secure_storage_path()))
        await vault.save(key_hex, "pw", "pw")
        key_hex = await vault.load(address, "pw")
    """

    def __init__(self, storage, cipher: Optional[SymmetricCipher] = None, curve=None):
        """
        Args:
            storage: Secure storage backend (set/get/keys)
            cipher: Password cipher (default: Argon2id + AES-256-GCM with
                the KDF cost from settings.json)
            curve: Elliptic-curve collaborator (default: eth-keys)
        """
        self.storage = storage
        self.cipher = cipher or SymmetricCipher.from_settings()
        self.curve = curve or default_curve

    async def save(self, private_key_hex: str, password: Optional[str] = None,
                   password_confirm: Optional[str] = None):
        """
        Validate and store a private key.

        All checks run before anything is written; on success exactly one
        storage write happens and its result is returned.

        Raises:
            IdentityError(INVALID_PRIVATE_KEY): not a valid secp256k1 key
            IdentityError(PASSWORD_MISMATCH): passwords missing one side or unequal
            IdentityError(UNSATISFIED_SECURE_STORAGE_IMPLEMENTATION): storage lacks set()
        """
        key_bytes = private_key_bytes(private_key_hex)
        if not self.curve.is_valid_private_key(key_bytes):
            raise IdentityError(ErrorKind.INVALID_PRIVATE_KEY)

        normalized = self.curve.add_hex_prefix(key_bytes.hex())
        address = derive_address(normalized, self.curve)
        encrypt = wants_encryption(password, password_confirm)
        storage_key = storage_key_for(address)

        if encrypt:
            envelope = await self.cipher.encrypt(normalized, password)
            value = envelope.serialize()
        else:
            value = normalized

        store = require_capability(self.storage, "set")
        result = await store(storage_key, value)
        logger.info(f"Stored private key for {address} (encrypted={encrypt})")
        return result

    async def create(self, password: Optional[str] = None,
                     password_confirm: Optional[str] = None,
                     generator: Optional[KeyGenerator] = None) -> str:
        """
        Generate a fresh key, store it and return its address.

        A rejected candidate is not retried here.
        """
        wants_encryption(password, password_confirm)
        generator = generator or KeyGenerator(validator=self.curve.is_valid_private_key)
        private_key_hex = await generator.generate()
        await self.save(private_key_hex, password, password_confirm)
        return derive_address(private_key_hex, self.curve)

    async def load(self, address: str, password: Optional[str] = None) -> str:
        """
        Load the 0x-prefixed private key stored for an address.

        Raises:
            IdentityError(KEY_NOT_FOUND): nothing stored for the address
            IdentityError(DECRYPTION_FAILED): password missing or wrong, or
                the record is corrupted
        """
        fetch = require_capability(self.storage, "get")
        checksummed = to_checksum_address(address)
        value = await fetch(storage_key_for(checksummed))
        if value is None:
            raise IdentityError(ErrorKind.KEY_NOT_FOUND, f"No private key stored for {checksummed}")

        if is_plaintext_key(value):
            return value

        if password is None:
            raise IdentityError(ErrorKind.DECRYPTION_FAILED,
                                f"Private key for {checksummed} is password protected")

        try:
            envelope = CipherEnvelope.deserialize(value)
            private_key_hex = await self.cipher.decrypt(envelope, password)
        except (ValueError, InvalidTag, HashingError) as e:
            raise IdentityError(ErrorKind.DECRYPTION_FAILED) from e

        if not is_plaintext_key(private_key_hex):
            raise IdentityError(ErrorKind.DECRYPTION_FAILED,
                                f"Decrypted record for {checksummed} is not a private key")

        logger.debug(f"Decrypted private key for {checksummed}")
        return private_key_hex

    async def unlock(self, address: str, password: Optional[str] = None) -> LocalAccount:
        """Load a key and wrap it in an eth_account account."""
        private_key_hex = await self.load(address, password)
        return Account.from_key(private_key_hex)

    async def addresses(self) -> list[str]:
        """Checksummed addresses of every stored key."""
        list_keys = require_capability(self.storage, "keys")
        stored = await list_keys()
        return [
            key[len(PRIVATE_ETH_KEY_PREFIX):]
            for key in stored
            if key.startswith(PRIVATE_ETH_KEY_PREFIX)
        ]

    async def has_key(self, address: str) -> bool:
        fetch = require_capability(self.storage, "get")
        return await fetch(storage_key_for(to_checksum_address(address))) is not None
