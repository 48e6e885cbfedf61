import json

import pytest

from xpack_user.core.exceptions import EncodingError
from xpack_user.core.models import DeclaredUser, ResourceState, hash_sum
from xpack_user.core.user_transformer import (
    UserTransformer,
    decode_user,
    diff_fields,
    encode_user,
    normalize_metadata,
)


def _body(declared, changed=()):
    return json.loads(encode_user(declared, changed))


def test_encode_minimal_user_omits_empty_fields():
    body = _body(DeclaredUser("alice", roles={"admin"}))
    assert body == {"roles": ["admin"], "enabled": True}


def test_encode_never_puts_username_in_body():
    body = _body(DeclaredUser("alice", roles={"admin"}, full_name="Alice"), {"username"})
    assert "username" not in body


def test_encode_full_user():
    declared = DeclaredUser(
        "alice",
        roles={"viewer", "admin"},
        full_name="Alice Liddell",
        email="alice@example.com",
        metadata='{"team": "search", "level": 3}',
    )
    body = _body(declared)
    assert body["roles"] == ["admin", "viewer"]
    assert body["full_name"] == "Alice Liddell"
    assert body["email"] == "alice@example.com"
    assert body["metadata"] == {"team": "search", "level": 3}


def test_encode_returns_bytes():
    assert isinstance(encode_user(DeclaredUser("alice", roles={"admin"}), ()), bytes)


def test_encode_omits_enabled_when_false():
    body = _body(DeclaredUser("alice", roles={"admin"}, enabled=False))
    assert "enabled" not in body


@pytest.mark.parametrize("metadata", ["", "{}", "  "])
def test_encode_omits_empty_metadata(metadata):
    body = _body(DeclaredUser("alice", roles={"admin"}, metadata=metadata))
    assert "metadata" not in body


@pytest.mark.parametrize("metadata", ["{not json", "[1, 2]", '"text"'])
def test_encode_rejects_bad_metadata(metadata):
    with pytest.raises(EncodingError):
        encode_user(DeclaredUser("alice", roles={"admin"}, metadata=metadata), ())


def test_unchanged_credentials_are_omitted():
    declared = DeclaredUser("alice", roles={"admin"}, password="secret1")
    body = _body(declared, {"roles", "email"})
    assert "password" not in body
    assert "password_hash" not in body


def test_changed_password_only_sends_password():
    declared = DeclaredUser("alice", roles={"admin"}, password="secret2")
    body = _body(declared, {"password"})
    assert body["password"] == "secret2"
    assert "password_hash" not in body


def test_changed_password_hash_is_sent():
    declared = DeclaredUser("alice", roles={"admin"}, password_hash="$2a$10$abc")
    body = _body(declared, {"password_hash"})
    assert body["password_hash"] == "$2a$10$abc"
    assert "password" not in body


def test_declared_user_rejects_both_credentials():
    with pytest.raises(ValueError, match="mutually exclusive"):
        DeclaredUser("alice", roles={"admin"}, password="secret1", password_hash="$2a$10$abc")


def test_decode_copies_fields_and_canonicalizes_metadata():
    snapshot = decode_user(
        {
            "username": "alice",
            "roles": ["admin"],
            "full_name": "Alice",
            "email": "alice@example.com",
            "enabled": True,
            "metadata": {"b": 1, "a": {"y": 2, "x": 1}},
        },
        "alice",
    )
    assert snapshot.username == "alice"
    assert snapshot.roles == ["admin"]
    assert snapshot.full_name == "Alice"
    assert snapshot.email == "alice@example.com"
    assert snapshot.enabled is True
    assert snapshot.metadata == '{"a":{"x":1,"y":2},"b":1}'


def test_decode_handles_missing_optional_fields():
    snapshot = decode_user({"roles": ["admin"], "enabled": True, "metadata": None}, "alice")
    assert snapshot.full_name == ""
    assert snapshot.email == ""
    assert snapshot.metadata == "{}"
    assert not hasattr(snapshot, "password")


def test_decode_rejects_unrepresentable_metadata():
    with pytest.raises(EncodingError):
        decode_user({"roles": [], "metadata": {"ratio": float("nan")}}, "alice")


@pytest.mark.parametrize(
    "metadata",
    [
        {"team": "search"},
        {"nested": {"list": [1, 2, {"k": None}], "flag": True}},
        {"z": 1, "a": 2, "m": "x"},
    ],
)
def test_metadata_round_trip_is_json_equivalent(metadata):
    snapshot = UserTransformer.from_wire({"roles": ["admin"], "metadata": metadata}, "alice")
    declared = DeclaredUser("alice", roles={"admin"}, metadata=snapshot.metadata)
    assert json.loads(encode_user(declared, ()))["metadata"] == metadata


def test_normalize_metadata_ignores_key_order_and_spacing():
    assert normalize_metadata('{"b": 1, "a": 2}') == normalize_metadata('{"a":2,"b":1}')
    assert normalize_metadata("") == "{}"


def test_diff_fields_null_baseline_marks_everything():
    declared = DeclaredUser("alice", roles={"admin"}, password="secret1")
    changed = diff_fields(declared, None)
    assert {"username", "roles", "metadata", "password"} <= changed
    assert "password_hash" not in changed


def test_diff_fields_against_state():
    state = ResourceState(
        id="alice",
        username="alice",
        roles=["admin"],
        full_name="Alice",
        metadata='{"a":1}',
        credential_digests={"password": hash_sum("secret1")},
    )
    same = DeclaredUser("alice", roles={"admin"}, full_name="Alice", metadata='{ "a": 1 }', password="secret1")
    assert diff_fields(same, state) == set()

    changed = DeclaredUser("alice", roles={"admin", "viewer"}, full_name="Alice", metadata='{"a":1}', password="secret2")
    assert diff_fields(changed, state) == {"roles", "password"}
