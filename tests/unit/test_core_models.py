"""Unit tests for xpack_user/core/models.py"""
import pytest

from xpack_user.core.models import DeclaredUser, ResourceState, UserSnapshot, hash_sum


def test_roles_are_normalized_to_a_set():
    user = DeclaredUser("alice", roles=["admin", "viewer", "admin"])
    assert user.roles == {"admin", "viewer"}


def test_roles_as_plain_string_rejected():
    with pytest.raises(ValueError, match="not a string"):
        DeclaredUser("alice", roles="admin")


def test_both_credentials_rejected():
    with pytest.raises(ValueError, match="mutually exclusive"):
        DeclaredUser("alice", password="secret1", password_hash="$2a$10$abc")


def test_credentials_hidden_from_repr():
    assert "secret1" not in repr(DeclaredUser("alice", password="secret1"))


def test_state_keeps_digests_not_plaintext():
    state = ResourceState()
    state.set_id("alice")
    state.remember_credentials(DeclaredUser("alice", password="secret1"), {"password"})

    assert state.credential_digests == {"password": hash_sum("secret1")}
    assert "secret1" not in str(state.to_dict())


def test_apply_snapshot_sorts_roles():
    state = ResourceState(id="alice", username="alice")
    state.apply_snapshot(UserSnapshot("alice", roles=["viewer", "admin"]))
    assert state.roles == ["admin", "viewer"]
