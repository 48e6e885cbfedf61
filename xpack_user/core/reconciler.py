"""Create/read/update/delete reconciliation for one security user.

Every write is followed by a read so local state always reflects what the
cluster reports, including server-applied defaults.

Usage:
    client = create_client("http://localhost:9200")
    reconciler = UserReconciler(client)

    state = ResourceState()
    reconciler.create(state, DeclaredUser("alice", roles={"admin"}, password="secret1"))
    assert state.id == "alice"
"""
from __future__ import annotations
import logging
from typing import Any, Iterable, Optional

from .adapters import UserAdapter, adapter_for
from .models import DeclaredUser, ResourceState
from .user_transformer import diff_fields, encode_user

logger = logging.getLogger(__name__)


class UserReconciler:
    """Drive a ResourceState towards a DeclaredUser on one cluster."""

    def __init__(self, client: Any):
        """Initialize reconciler.

        Args:
            client: Elastic7Client, Elastic6Client or Elastic5Client

        Raises:
            UnsupportedClientError: If the client family is unknown
        """
        self.adapter: UserAdapter = adapter_for(client)

    def create(self, state: ResourceState, declared: DeclaredUser) -> None:
        """Create the user, then refresh state from the cluster.

        Raises:
            EncodingError: If the declared metadata is malformed
            UnsupportedOperationError: On a client family without user support
        """
        changed = diff_fields(declared, None)
        body = encode_user(declared, changed)
        self.adapter.put_user(declared.username, body)
        logger.info("Created user %s via %s", declared.username, self.adapter.family)

        state.set_id(declared.username)
        state.remember_credentials(declared, changed)
        self.read(state)

    def read(self, state: ResourceState) -> None:
        """Refresh ``state`` from the cluster.

        A user that no longer exists remotely is dropped from state without
        raising. Any other failure propagates and leaves state untouched.
        """
        username = state.id
        try:
            snapshot = self.adapter.get_user(username)
        except Exception as exc:
            if self.adapter.is_not_found(exc):
                logger.warning("User %s not found. Removing from state", username)
                state.clear()
                return
            raise
        state.apply_snapshot(snapshot)

    def update(
        self,
        state: ResourceState,
        declared: DeclaredUser,
        changed_fields: Optional[Iterable[str]] = None,
    ) -> None:
        """Apply ``declared`` to an existing user, then refresh state.

        Args:
            state: Last-known state; its identity selects the remote user
            declared: Desired user state
            changed_fields: Attributes that changed; computed from state if omitted

        Raises:
            ValueError: If ``declared`` names a different user than ``state``
        """
        username = state.id or declared.username
        if declared.username != username:
            raise ValueError(
                f"username is immutable: state holds {username!r}, declared {declared.username!r}"
            )
        changed = set(changed_fields) if changed_fields is not None else diff_fields(declared, state)
        body = encode_user(declared, changed)
        self.adapter.put_user(username, body)
        logger.info("Updated user %s via %s (changed: %s)", username, self.adapter.family, sorted(changed))

        state.set_id(username)
        state.remember_credentials(declared, changed)
        self.read(state)

    def delete(self, state: ResourceState) -> None:
        """Delete the user. Local identity is cleared whatever the outcome.

        Raises:
            Exception: Any failure other than not-found, after state is cleared
        """
        username = state.id
        try:
            self.adapter.delete_user(username)
        except Exception as exc:
            if not self.adapter.is_not_found(exc):
                raise
            logger.warning("User %s not found. Resource removed from state", username)
        else:
            logger.info("Deleted user %s via %s", username, self.adapter.family)
        finally:
            state.clear()
