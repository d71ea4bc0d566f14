"""
Profile models.

The local user's profile, its shareable public projection and the table
schema it is stored in.
"""

from dataclasses import dataclass, asdict, field


PROFILE_VERSION = "1.0.0"

# The profile table holds a single row under this id
PROFILE_ID = 1


@dataclass(frozen=True)
class TableSchema:
    """Schema of one table: name, primary key and typed properties."""
    name: str
    primary_key: str
    properties: dict[str, str]


PROFILE_SCHEMA = TableSchema(
    name="Profile",
    primary_key="id",
    properties={
        "id": "int",
        "pseudo": "string",
        "description": "string",
        "image": "string",
    },
)


@dataclass
class Profile:
    """The local user's identity metadata."""
    id: int
    pseudo: str
    description: str
    image: str          # Opaque encoded blob, e.g. base64

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        """Create from a database row."""
        return cls(
            id=int(data["id"]),
            pseudo=data["pseudo"],
            description=data["description"],
            image=data["image"],
        )


@dataclass
class IdentityArtifacts:
    """Public identifiers supplied by the key/identity subsystem."""
    eth_addresses: list[str] = field(default_factory=list)
    mesh_keys: list[str] = field(default_factory=list)
    ident_keys: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.eth_addresses or self.mesh_keys or self.ident_keys)


@dataclass(frozen=True)
class PublicProfile:
    """Read-only shareable view of the profile. Never persisted."""
    pseudo: str
    description: str
    image: str
    eth_addresses: list[str]
    mesh_keys: list[str]
    ident_keys: list[str]
    version: str = PROFILE_VERSION

    @classmethod
    def build(cls, profile: Profile, artifacts: IdentityArtifacts) -> "PublicProfile":
        return cls(
            pseudo=profile.pseudo,
            description=profile.description,
            image=profile.image,
            eth_addresses=list(artifacts.eth_addresses),
            mesh_keys=list(artifacts.mesh_keys),
            ident_keys=list(artifacts.ident_keys),
        )

    def to_dict(self) -> dict:
        """Convert to the shared wire representation."""
        return {
            "pseudo": self.pseudo,
            "description": self.description,
            "image": self.image,
            "ethAddresses": list(self.eth_addresses),
            "meshKeys": list(self.mesh_keys),
            "identKey": list(self.ident_keys),
            "version": self.version,
        }
