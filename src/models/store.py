"""
Profile Store - The single local profile row.

The Profile table is a singleton: set_profile updates the existing row or
creates it, it never adds a second one.
"""

import logging
from collections.abc import Mapping
from typing import Awaitable, Callable, Optional

from errors import ErrorKind, IdentityError
from .database import Database
from .profile import (
    PROFILE_ID,
    PROFILE_SCHEMA,
    Profile,
    PublicProfile,
)

logger = logging.getLogger(__name__)


class ProfileStore:
    """
    Reads and writes the local profile.

    The read-then-write in set_profile is not guarded by a transaction;
    concurrent callers needing serialization must provide it themselves.
    """

    def __init__(self, database: Database, identity_source=None,
                 count_query: Optional[Callable[[], Awaitable[int]]] = None):
        """
        Args:
            database: Database holding the Profile table
            identity_source: Supplier of public identifiers (see models.identity)
            count_query: Replacement for the row count used by has_profile
        """
        self.database = database
        self.identity_source = identity_source
        self.table = PROFILE_SCHEMA.name
        self._count_query = count_query or (lambda: self.database.count(self.table))

    async def _fetch_row(self) -> Optional[dict]:
        rows = await self.database.select(self.table, limit=1)
        return rows[0] if rows else None

    async def set_profile(self, pseudo, description: Optional[str] = None,
                          image: Optional[str] = None) -> Profile:
        """
        Create or update the profile.

        Accepts either (pseudo, description, image) or a single mapping with
        those keys.
        """
        if isinstance(pseudo, Mapping):
            fields = pseudo
            pseudo = fields["pseudo"]
            description = fields["description"]
            image = fields["image"]
        if description is None or image is None:
            raise TypeError("set_profile() requires pseudo, description and image")

        values = {"pseudo": pseudo, "description": description, "image": image}
        row = await self._fetch_row()
        if row is not None:
            await self.database.update(self.table, row["id"], values)
            logger.info("Updated profile")
            return Profile(id=row["id"], **values)

        await self.database.insert(self.table, {"id": PROFILE_ID, **values})
        logger.info("Created profile")
        return Profile(id=PROFILE_ID, **values)

    async def get_profile(self) -> Profile:
        """
        Raises: IdentityError(NO_PROFILE_PRESENT) when no profile was set.
        """
        row = await self._fetch_row()
        if row is None:
            raise IdentityError(ErrorKind.NO_PROFILE_PRESENT)
        return Profile.from_dict(row)

    async def get_public_profile(self) -> PublicProfile:
        """
        Raises:
            IdentityError(NO_PROFILE_PRESENT): no profile was set
            IdentityError(NO_PUBLIC_PROFILE_PRESENT): no identity artifacts
        """
        profile = await self.get_profile()

        if self.identity_source is None:
            raise IdentityError(ErrorKind.NO_PUBLIC_PROFILE_PRESENT,
                                "No identity source configured")
        artifacts = await self.identity_source.artifacts()
        if artifacts is None or artifacts.is_empty():
            raise IdentityError(ErrorKind.NO_PUBLIC_PROFILE_PRESENT)

        return PublicProfile.build(profile, artifacts)

    async def has_profile(self) -> bool:
        """True iff the profile table has a row. Query errors propagate."""
        return await self._count_query() >= 1
