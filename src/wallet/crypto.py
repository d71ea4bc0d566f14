"""
Wallet Crypto - Password-based encryption of key material.

Industry-standard security:
- Argon2id key derivation (memory-hard)
- AES-256-GCM authenticated encryption

The KDF parameters are stored in the envelope so a record stays
decryptable after the configured cost changes.
"""

import os
import json
import asyncio
import secrets
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, asdict

# Cryptography
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from argon2.low_level import hash_secret_raw, Type

from utils import load_settings


# ============================================
# Security Constants
# ============================================

# Argon2id parameters (OWASP recommendations for high-security)
ARGON2_TIME_COST = 3
ARGON2_MEMORY_COST = 65536  # 64 MB
ARGON2_PARALLELISM = 4
ARGON2_HASH_LEN = 32  # 256 bits for AES-256
ARGON2_SALT_SIZE = 16

# AES-GCM constants
AES_IV_SIZE = 12  # 96 bits (recommended for GCM)
AES_TAG_SIZE = 16

ENVELOPE_VERSION = 1
ENVELOPE_CIPHER = "aes-256-gcm"
ENVELOPE_KDF = "argon2id"

# Secure file permissions (Unix only)
SECURE_FILE_MODE = 0o600  # Owner read/write only


def set_secure_permissions(filepath: Path) -> None:
    """
    Set restrictive file permissions on Unix systems.

    Sets file to mode 0600 (owner read/write only) to protect stored keys.
    No-op on Windows (NTFS uses ACLs, not Unix permissions).
    """
    if os.name == 'posix':
        try:
            os.chmod(filepath, SECURE_FILE_MODE)
        except OSError:
            # Best effort - don't fail save operation if chmod fails
            pass


# ============================================
# Data Classes
# ============================================

@dataclass(frozen=True)
class KdfParams:
    """Argon2id cost parameters."""
    time_cost: int = ARGON2_TIME_COST
    memory_cost: int = ARGON2_MEMORY_COST
    parallelism: int = ARGON2_PARALLELISM

    def __post_init__(self):
        for name, value in asdict(self).items():
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"kdf.{name} must be a positive integer, got {value!r}")

    @classmethod
    def from_settings(cls, settings: dict) -> "KdfParams":
        """Read the optional "kdf" section of settings.json."""
        kdf = settings.get("kdf") or {}
        return cls(
            time_cost=kdf.get("time_cost", ARGON2_TIME_COST),
            memory_cost=kdf.get("memory_cost", ARGON2_MEMORY_COST),
            parallelism=kdf.get("parallelism", ARGON2_PARALLELISM),
        )


@dataclass
class CipherEnvelope:
    """Serialized output of encrypt_secret."""
    ciphertext: bytes
    iv: bytes
    tag: bytes
    salt: bytes
    kdf: KdfParams

    def to_dict(self) -> dict:
        return {
            "version": ENVELOPE_VERSION,
            "cipher": ENVELOPE_CIPHER,
            "kdf": {
                "algorithm": ENVELOPE_KDF,
                "salt": self.salt.hex(),
                "time_cost": self.kdf.time_cost,
                "memory_cost": self.kdf.memory_cost,
                "parallelism": self.kdf.parallelism,
            },
            "ciphertext": self.ciphertext.hex(),
            "iv": self.iv.hex(),
            "tag": self.tag.hex(),
        }

    def serialize(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict) -> "CipherEnvelope":
        """Create from dictionary with input validation."""
        if data.get("version") != ENVELOPE_VERSION:
            raise ValueError(f"Unsupported envelope version: {data.get('version')}")
        if data.get("cipher") != ENVELOPE_CIPHER:
            raise ValueError(f"Unsupported cipher: {data.get('cipher')}")
        kdf = data["kdf"]
        if kdf.get("algorithm") != ENVELOPE_KDF:
            raise ValueError(f"Unsupported kdf: {kdf.get('algorithm')}")

        return cls(
            ciphertext=bytes.fromhex(data["ciphertext"]),
            iv=bytes.fromhex(data["iv"]),
            tag=bytes.fromhex(data["tag"]),
            salt=bytes.fromhex(kdf["salt"]),
            kdf=KdfParams(
                time_cost=kdf["time_cost"],
                memory_cost=kdf["memory_cost"],
                parallelism=kdf["parallelism"],
            ),
        )

    @classmethod
    def deserialize(cls, value: str) -> "CipherEnvelope":
        """
        Parse a serialized envelope.

        Raises: ValueError if value is not an envelope.
        """
        try:
            data = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError("Not a cipher envelope") from e
        if not isinstance(data, dict):
            raise ValueError("Not a cipher envelope")
        try:
            return cls.from_dict(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Malformed cipher envelope: {e}") from e


# ============================================
# Key Derivation
# ============================================

def derive_key(password: str, salt: bytes, params: Optional[KdfParams] = None) -> bytes:
    """
    Derive an encryption key from password using Argon2id.

    Argon2id is memory-hard, making brute-force attacks expensive.
    With the default parameters, each password guess requires ~64MB RAM.
    """
    params = params or KdfParams()
    return hash_secret_raw(
        secret=password.encode('utf-8'),
        salt=salt,
        time_cost=params.time_cost,
        memory_cost=params.memory_cost,
        parallelism=params.parallelism,
        hash_len=ARGON2_HASH_LEN,
        type=Type.ID
    )


# ============================================
# Encryption
# ============================================

def encrypt_secret(plaintext: str, password: str,
                   params: Optional[KdfParams] = None) -> CipherEnvelope:
    """Encrypt a secret with a password."""
    params = params or KdfParams()
    salt = secrets.token_bytes(ARGON2_SALT_SIZE)
    key = derive_key(password, salt, params)
    iv = secrets.token_bytes(AES_IV_SIZE)

    aesgcm = AESGCM(key)
    ciphertext_and_tag = aesgcm.encrypt(iv, plaintext.encode('utf-8'), None)

    return CipherEnvelope(
        ciphertext=ciphertext_and_tag[:-AES_TAG_SIZE],
        iv=iv,
        tag=ciphertext_and_tag[-AES_TAG_SIZE:],
        salt=salt,
        kdf=params,
    )


def decrypt_secret(envelope: CipherEnvelope, password: str) -> str:
    """
    Decrypt a secret with a password.

    Raises: InvalidTag if password is wrong or data is tampered.
    """
    key = derive_key(password, envelope.salt, envelope.kdf)

    aesgcm = AESGCM(key)
    plaintext = aesgcm.decrypt(envelope.iv, envelope.ciphertext + envelope.tag, None)

    return plaintext.decode('utf-8')


class SymmetricCipher:
    """
    Password cipher used by the key vault.

    Argon2 is CPU and memory heavy, so both directions run on a worker
    thread instead of blocking the event loop.
    """

    def __init__(self, params: Optional[KdfParams] = None):
        self.params = params or KdfParams()

    @classmethod
    def from_settings(cls, settings: Optional[dict] = None) -> "SymmetricCipher":
        """Cipher using the "kdf" section of settings.json."""
        if settings is None:
            settings = load_settings()
        return cls(KdfParams.from_settings(settings))

    async def encrypt(self, plaintext: str, password: str) -> CipherEnvelope:
        return await asyncio.to_thread(encrypt_secret, plaintext, password, self.params)

    async def decrypt(self, envelope: CipherEnvelope, password: str) -> str:
        return await asyncio.to_thread(decrypt_secret, envelope, password)
