"""
Identity sources - Supply the public identifiers shown in the public profile.

A source exposes `await artifacts()` returning IdentityArtifacts, or None
when nothing is available yet.
"""

from typing import Iterable, Optional, Protocol

from .profile import IdentityArtifacts


class IdentitySource(Protocol):
    async def artifacts(self) -> Optional[IdentityArtifacts]: ...


class StaticIdentitySource:
    """Fixed artifacts, e.g. handed over by the mesh layer at startup."""

    def __init__(self, artifacts: Optional[IdentityArtifacts] = None):
        self._artifacts = artifacts

    async def artifacts(self) -> Optional[IdentityArtifacts]:
        return self._artifacts


class VaultIdentitySource:
    """Ethereum addresses from a key vault plus externally known mesh keys."""

    def __init__(self, vault, mesh_keys: Iterable[str] = (), ident_keys: Iterable[str] = ()):
        self.vault = vault
        self.mesh_keys = list(mesh_keys)
        self.ident_keys = list(ident_keys)

    async def artifacts(self) -> Optional[IdentityArtifacts]:
        eth_addresses = await self.vault.addresses()
        artifacts = IdentityArtifacts(
            eth_addresses=eth_addresses,
            mesh_keys=list(self.mesh_keys),
            ident_keys=list(self.ident_keys),
        )
        if artifacts.is_empty():
            return None
        return artifacts
