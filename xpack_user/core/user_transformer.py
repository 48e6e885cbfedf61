"""Declared user ⇄ security API body ⇄ local state transformations.

Usage:
    # Declared → wire body (bytes)
    body = UserTransformer.to_wire(declared, changed_fields={"password"})

    # Get-user response → snapshot
    snapshot = UserTransformer.from_wire(response["alice"], "alice")
"""
from __future__ import annotations
import json
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Set

from .exceptions import EncodingError
from .models import (
    CREDENTIAL_FIELDS,
    USER_FIELDS,
    DeclaredUser,
    ResourceState,
    UserSnapshot,
    hash_sum,
)

logger = logging.getLogger(__name__)


def _canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), allow_nan=False)


def parse_metadata(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parse declared metadata; return None when there is nothing to send.

    Raises:
        EncodingError: If the string is not JSON or not a JSON object
    """
    if raw is None or not raw.strip():
        return None
    try:
        parsed = json.loads(raw)
    except ValueError as exc:
        raise EncodingError(f"metadata is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise EncodingError(f"metadata must be a JSON object, got {type(parsed).__name__}")
    return parsed or None


def normalize_metadata(raw: Optional[str]) -> str:
    """Canonical JSON form of declared metadata, used for comparisons."""
    return _canonical_json(parse_metadata(raw) or {})


class UserTransformer:
    """Bidirectional transformer for security user representations."""

    @staticmethod
    def to_wire(declared: DeclaredUser, changed_fields: Iterable[str]) -> bytes:
        """Serialize a declared user into a put-user request body.

        Credentials are only included when named in ``changed_fields``.
        The username is the request path key and never part of the body.

        Args:
            declared: Desired user state
            changed_fields: Attributes that differ from last-known state

        Returns:
            UTF-8 JSON body

        Raises:
            EncodingError: If metadata is malformed
        """
        changed = set(changed_fields)
        body: Dict[str, Any] = {"roles": sorted(declared.roles)}

        if declared.full_name:
            body["full_name"] = declared.full_name
        if declared.email:
            body["email"] = declared.email
        # False is indistinguishable from unset on the wire
        if declared.enabled:
            body["enabled"] = True

        metadata = parse_metadata(declared.metadata)
        if metadata:
            body["metadata"] = metadata

        for name in CREDENTIAL_FIELDS:
            value = getattr(declared, name)
            if name in changed and value:
                body[name] = value

        if logger.isEnabledFor(logging.DEBUG):
            masked = {k: ("***" if k in CREDENTIAL_FIELDS else v) for k, v in body.items()}
            logger.debug("put body for %s: %s", declared.username, masked)

        try:
            return json.dumps(body, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncodingError(f"cannot encode user {declared.username!r}: {exc}") from exc

    @staticmethod
    def from_wire(user: Mapping[str, Any], username: str) -> UserSnapshot:
        """Convert one user document from a get-user response.

        Args:
            user: Document nested under the username key
            username: Requested username

        Returns:
            Snapshot with metadata re-serialized to canonical JSON

        Raises:
            EncodingError: If metadata cannot be represented as JSON
        """
        metadata = user.get("metadata")
        try:
            metadata_json = _canonical_json(metadata if metadata is not None else {})
        except (TypeError, ValueError) as exc:
            raise EncodingError(f"cannot represent metadata of user {username!r}: {exc}") from exc

        return UserSnapshot(
            username=username,
            roles=list(user.get("roles") or []),
            full_name=user.get("full_name") or "",
            email=user.get("email") or "",
            enabled=bool(user.get("enabled", False)),
            metadata=metadata_json,
        )

    @staticmethod
    def diff_fields(declared: DeclaredUser, state: Optional[ResourceState]) -> Set[str]:
        """Names of declared attributes that differ from last-known state.

        A missing or empty state is a null baseline: every field counts as
        changed, including any supplied credential.
        """
        if state is None or not state.exists:
            changed = set(USER_FIELDS)
            changed.update(name for name in CREDENTIAL_FIELDS if getattr(declared, name))
            return changed

        changed = set()
        if declared.username != state.username:
            changed.add("username")
        if declared.full_name != state.full_name:
            changed.add("full_name")
        if declared.email != state.email:
            changed.add("email")
        if declared.enabled != state.enabled:
            changed.add("enabled")
        if sorted(declared.roles) != sorted(state.roles):
            changed.add("roles")
        if normalize_metadata(declared.metadata) != normalize_metadata(state.metadata):
            changed.add("metadata")

        for name in CREDENTIAL_FIELDS:
            value = getattr(declared, name)
            previous = state.credential_digests.get(name)
            current = hash_sum(value) if value else None
            if current != previous:
                changed.add(name)
        return changed


def encode_user(declared: DeclaredUser, changed_fields: Iterable[str]) -> bytes:
    """Serialize a declared user. Delegates to UserTransformer.to_wire."""
    return UserTransformer.to_wire(declared, changed_fields)


def decode_user(user: Mapping[str, Any], username: str) -> UserSnapshot:
    """Convert a get-user document. Delegates to UserTransformer.from_wire."""
    return UserTransformer.from_wire(user, username)


def diff_fields(declared: DeclaredUser, state: Optional[ResourceState]) -> Set[str]:
    """Changed attribute names. Delegates to UserTransformer.diff_fields."""
    return UserTransformer.diff_fields(declared, state)
