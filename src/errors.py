"""
Errors - Failure kinds raised by the identity core.

Every failure the core reports itself is an IdentityError tagged with one
ErrorKind. Collaborator failures (entropy, storage, database) are not
wrapped and reach the caller unchanged.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kinds of failure reported by the identity core."""
    INVALID_PRIVATE_KEY = "invalid_private_key"
    PASSWORD_MISMATCH = "password_mismatch"
    UNSATISFIED_SECURE_STORAGE_IMPLEMENTATION = "unsatisfied_secure_storage_implementation"
    NO_PROFILE_PRESENT = "no_profile_present"
    NO_PUBLIC_PROFILE_PRESENT = "no_public_profile_present"
    KEY_NOT_FOUND = "key_not_found"
    DECRYPTION_FAILED = "decryption_failed"


_DEFAULT_MESSAGES = {
    ErrorKind.INVALID_PRIVATE_KEY: "Invalid private key",
    ErrorKind.PASSWORD_MISMATCH: "Password and password confirmation do not match",
    ErrorKind.UNSATISFIED_SECURE_STORAGE_IMPLEMENTATION: "Secure storage implementation is incomplete",
    ErrorKind.NO_PROFILE_PRESENT: "No profile present",
    ErrorKind.NO_PUBLIC_PROFILE_PRESENT: "No public profile present",
    ErrorKind.KEY_NOT_FOUND: "No private key stored for this address",
    ErrorKind.DECRYPTION_FAILED: "Wrong password or corrupted key record",
}


class IdentityError(Exception):
    """
    Error raised by the identity core.

    Callers branch on `kind`. `detail` carries extra diagnostics, e.g. the
    name of the missing secure storage method.
    """

    def __init__(self, kind: ErrorKind, message: Optional[str] = None,
                 detail: Optional[str] = None):
        self.kind = kind
        self.detail = detail
        super().__init__(message or _DEFAULT_MESSAGES[kind])

    def __repr__(self) -> str:
        return f"IdentityError({self.kind.name}, {str(self)!r})"


def missing_storage_method(method_name: str) -> IdentityError:
    """Build the error for a secure storage backend lacking `method_name`."""
    return IdentityError(
        ErrorKind.UNSATISFIED_SECURE_STORAGE_IMPLEMENTATION,
        f'Missing method: "{method_name}" in secure storage implementation',
        detail=method_name,
    )
