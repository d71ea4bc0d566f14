"""
Wallet package - Private key lifecycle for the local identity.

Contains:
- KeyGenerator, is_valid_private_key: key generation and validation
- derive_address, to_checksum_address: EIP-55 address derivation
- SymmetricCipher, CipherEnvelope: password encryption of key material
- KeyVault: storage of validated, optionally encrypted keys
- InMemorySecureStorage, FileSecureStorage: secure storage backends
"""

from .keys import (
    SECP256K1_N,
    EthKeysCurve,
    KeyGenerator,
    generate_private_key,
    is_valid_private_key,
    derive_address,
    derive_public_key,
    to_checksum_address,
)
from .crypto import (
    KdfParams,
    CipherEnvelope,
    SymmetricCipher,
    encrypt_secret,
    decrypt_secret,
)
from .storage import (
    SecureStorage,
    InMemorySecureStorage,
    FileSecureStorage,
    require_capability,
)
from .vault import (
    KeyVault,
    PRIVATE_ETH_KEY_PREFIX,
    storage_key_for,
)

__all__ = [
    # Keys
    "SECP256K1_N",
    "EthKeysCurve",
    "KeyGenerator",
    "generate_private_key",
    "is_valid_private_key",
    "derive_address",
    "derive_public_key",
    "to_checksum_address",
    # Crypto
    "KdfParams",
    "CipherEnvelope",
    "SymmetricCipher",
    "encrypt_secret",
    "decrypt_secret",
    # Storage
    "SecureStorage",
    "InMemorySecureStorage",
    "FileSecureStorage",
    "require_capability",
    # Vault
    "KeyVault",
    "PRIVATE_ETH_KEY_PREFIX",
    "storage_key_for",
]
