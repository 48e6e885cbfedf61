"""Declared, remote and persisted representations of a security user."""
from __future__ import annotations
import hashlib
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Set

# Attribute names as seen by the diffing layer
USER_FIELDS = ("username", "full_name", "email", "enabled", "roles", "metadata")
CREDENTIAL_FIELDS = ("password", "password_hash")


def hash_sum(contents: str) -> str:
    """SHA-1 hex digest used to remember credentials without storing them."""
    return hashlib.sha1(contents.encode("utf-8")).hexdigest()


@dataclass
class DeclaredUser:
    """Desired state of a user as supplied by the caller."""
    username: str
    roles: Set[str] = field(default_factory=set)
    full_name: str = ""
    email: str = ""
    enabled: bool = True
    metadata: str = "{}"
    password: str = field(default="", repr=False)
    password_hash: str = field(default="", repr=False)

    def __post_init__(self):
        if isinstance(self.roles, str):
            raise ValueError("roles must be a collection of role names, not a string")
        self.roles = set(self.roles)
        if self.password and self.password_hash:
            raise ValueError("password and password_hash are mutually exclusive")


@dataclass
class UserSnapshot:
    """User as returned by the cluster. Credentials are never returned."""
    username: str
    roles: List[str] = field(default_factory=list)
    full_name: str = ""
    email: str = ""
    enabled: bool = True
    metadata: str = "{}"


@dataclass
class ResourceState:
    """Locally persisted state of one managed user.

    ``id`` is the local identity: the username while the user is believed to
    exist remotely, empty otherwise.
    """
    id: str = ""
    username: str = ""
    roles: List[str] = field(default_factory=list)
    full_name: str = ""
    email: str = ""
    enabled: bool = True
    metadata: str = "{}"
    credential_digests: Dict[str, str] = field(default_factory=dict)

    @property
    def exists(self) -> bool:
        return bool(self.id)

    def set_id(self, username: str) -> None:
        self.id = username

    def clear(self) -> None:
        """Forget the resource entirely."""
        self.id = ""
        self.username = ""
        self.roles = []
        self.full_name = ""
        self.email = ""
        self.enabled = True
        self.metadata = "{}"
        self.credential_digests = {}

    def apply_snapshot(self, snapshot: UserSnapshot) -> None:
        """Overwrite every non-credential field from a fresh read."""
        self.username = snapshot.username
        self.roles = sorted(snapshot.roles)
        self.full_name = snapshot.full_name
        self.email = snapshot.email
        self.enabled = snapshot.enabled
        self.metadata = snapshot.metadata

    def remember_credentials(self, declared: DeclaredUser, changed: Set[str]) -> None:
        """Record digests for the credentials transmitted on the last write."""
        for name in CREDENTIAL_FIELDS:
            if name not in changed:
                continue
            value = getattr(declared, name)
            if value:
                self.credential_digests[name] = hash_sum(value)
            else:
                self.credential_digests.pop(name, None)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ResourceState":
        data = data or {}
        known = {name: data[name] for name in cls.__dataclass_fields__ if name in data}
        return cls(**known)
