"""
Models package - Profile data for meshid.

Contains:
- Profile: The local user's profile (single row)
- PublicProfile: Shareable projection with public identifiers
- Database: Schema-driven SQLite persistence
- ProfileStore: Singleton profile repository
"""

from .profile import (
    Profile,
    PublicProfile,
    IdentityArtifacts,
    TableSchema,
    PROFILE_SCHEMA,
    PROFILE_VERSION,
    PROFILE_ID,
)
from .database import Database
from .identity import StaticIdentitySource, VaultIdentitySource
from .store import ProfileStore

__all__ = [
    "Profile",
    "PublicProfile",
    "IdentityArtifacts",
    "TableSchema",
    "PROFILE_SCHEMA",
    "PROFILE_VERSION",
    "PROFILE_ID",
    "Database",
    "StaticIdentitySource",
    "VaultIdentitySource",
    "ProfileStore",
]
