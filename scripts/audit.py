"""Audit logging utilities for security user reconciliation events."""

from __future__ import annotations
import datetime
import hashlib
import hmac
import json
import os
import sys
from pathlib import Path
from typing import Any, Iterable, Literal

AUDIT_LOG_DIR = Path(os.environ.get("AUDIT_LOG_DIR", ".runtime/audit"))
AUDIT_LOG_FILE = AUDIT_LOG_DIR / "user-events.jsonl"


def _get_signing_key() -> bytes:
    """Get the audit signing key from environment (read on every call)."""
    key_file = os.environ.get("AUDIT_LOG_SIGNING_KEY_FILE")
    if key_file:
        path = Path(key_file)
        if path.exists():
            try:
                return path.read_text(encoding="utf-8").strip().encode("utf-8")
            except OSError:
                pass
    return os.environ.get("AUDIT_LOG_SIGNING_KEY", "").strip().encode("utf-8")


EventType = Literal["user_create", "user_update", "user_delete", "user_read", "user_gone"]


def _ensure_audit_dir() -> None:
    """Create audit directory with restricted permissions."""
    AUDIT_LOG_DIR.mkdir(parents=True, exist_ok=True)
    AUDIT_LOG_DIR.chmod(0o700)


def _sign_event(event: dict[str, Any]) -> str:
    """HMAC-SHA256 over the canonical JSON of ``event``; empty without a key."""
    signing_key = _get_signing_key()
    if not signing_key:
        return ""
    canonical = json.dumps(event, sort_keys=True, separators=(",", ":"))
    return hmac.new(signing_key, canonical.encode("utf-8"), hashlib.sha256).hexdigest()


def build_user_event(
    event_type: EventType,
    username: str,
    *,
    operator: str = "system",
    cluster: str = "",
    family: str = "",
    changed_fields: Iterable[str] = (),
    error: str = "",
    success: bool = True,
) -> dict[str, Any]:
    """Assemble one reconciliation record, signed when a key is configured.

    Args:
        event_type: Reconciliation step (user_create, user_update, ...)
        username: Target username
        operator: Who ran the reconciliation
        cluster: Cluster URL the operation was sent to
        family: Client family that handled it (elastic7, elastic6, elastic5)
        changed_fields: Attributes written by a create or update; credential
            names may appear, their values never do
        error: Failure message when ``success`` is False
        success: Whether the operation succeeded
    """
    event: dict[str, Any] = {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "event_type": event_type,
        "cluster": cluster,
        "family": family,
        "username": username,
        "operator": operator,
        "changed_fields": sorted(changed_fields),
        "success": success,
    }
    if error:
        event["error"] = error

    signature = _sign_event(event)
    if signature:
        event["signature"] = signature
    return event


def log_user_event(event_type: EventType, username: str, **fields: Any) -> None:
    """Append a reconciliation event to the audit trail (see build_user_event)."""
    event = build_user_event(event_type, username, **fields)
    _ensure_audit_dir()

    with AUDIT_LOG_FILE.open("a", encoding="utf-8") as f:
        f.write(json.dumps(event, ensure_ascii=False) + "\n")

    AUDIT_LOG_FILE.chmod(0o600)


def safe_log_user_event(event_type: EventType, username: str, **fields: Any) -> bool:
    """Log a user event, reporting failures on stderr instead of raising.

    Returns:
        True if event was logged successfully, False if logging failed
    """
    try:
        log_user_event(event_type, username, **fields)
        return True
    except OSError as e:
        print(
            f"[audit] Warning: Failed to log {event_type} event for {username}: {e}",
            file=sys.stderr,
        )
        return False


def verify_audit_log() -> tuple[int, int]:
    """Count events and how many carry a valid signature.

    Unsigned or unparseable lines count towards the total only.
    """
    if not AUDIT_LOG_FILE.exists():
        return 0, 0

    total = 0
    valid = 0
    with AUDIT_LOG_FILE.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            total += 1
            try:
                event = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(event, dict):
                continue
            stored_sig = event.pop("signature", "")
            computed_sig = _sign_event(event)
            if stored_sig and computed_sig and hmac.compare_digest(stored_sig, computed_sig):
                valid += 1

    return total, valid


if __name__ == "__main__":
    total, valid = verify_audit_log()
    print(f"Audit log: {valid}/{total} events with valid signatures")
    sys.exit(0 if total == valid else 1)
