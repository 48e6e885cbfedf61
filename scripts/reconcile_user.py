"""Reconcile one Elasticsearch security user from the command line.

This module serves as a CLI wrapper around xpack_user.core.reconciler.
Local state lives in one JSON file per username under the state directory.
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import requests

from xpack_user.config.settings import load_settings
from xpack_user.core.elastic import ElasticError, create_client
from xpack_user.core.exceptions import XPackUserError
from xpack_user.core.models import DeclaredUser, ResourceState
from xpack_user.core.reconciler import UserReconciler
from xpack_user.core.user_transformer import diff_fields
from xpack_user.core.validators import validate_password, validate_roles, validate_username
from scripts import audit

FAILURES = (XPackUserError, ElasticError, requests.RequestException, ValueError)


def load_declared(path: Path) -> DeclaredUser:
    """Build a validated DeclaredUser from a JSON document."""
    data: Dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")

    username = validate_username(data.get("username") or "")
    password = data.get("password") or ""
    if password:
        validate_password(password)

    metadata = data.get("metadata", "{}")
    if not isinstance(metadata, str):
        metadata = json.dumps(metadata)

    return DeclaredUser(
        username=username,
        roles=set(validate_roles(data.get("roles") or [])),
        full_name=data.get("full_name") or "",
        email=data.get("email") or "",
        enabled=bool(data.get("enabled", True)),
        metadata=metadata,
        password=password,
        password_hash=data.get("password_hash") or "",
    )


def load_state(path: Path) -> ResourceState:
    if not path.exists():
        return ResourceState()
    return ResourceState.from_dict(json.loads(path.read_text(encoding="utf-8")))


def save_state(path: Path, state: ResourceState) -> None:
    """Persist state, or remove the file once the user is gone."""
    if not state.exists:
        if path.exists():
            path.unlink()
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(state.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
    path.chmod(0o600)


def _public_view(state: ResourceState) -> Dict[str, Any]:
    view = state.to_dict()
    view.pop("credential_digests", None)
    return view


def main() -> None:
    """Command-line entry point."""
    settings = load_settings()

    parser = argparse.ArgumentParser(description="Elasticsearch security user reconciler")
    parser.add_argument("--es-url", default=settings.elasticsearch_url)
    parser.add_argument("--es-version", type=int, default=settings.elasticsearch_version,
                        help="Cluster major version (probed from GET / when omitted)")
    parser.add_argument("--timeout", type=float, default=settings.request_timeout)
    parser.add_argument("--state-dir", type=Path, default=settings.state_dir)
    parser.add_argument("--operator", default="automation",
                        help="Operator identifier for audit logs (default: automation)")
    parser.add_argument("--verbose", action="store_true")

    sub = parser.add_subparsers(dest="cmd")

    sa = sub.add_parser("apply", help="Create or update a user from a JSON file")
    sa.add_argument("--file", type=Path, required=True)

    sr = sub.add_parser("read", help="Refresh stored state from the cluster")
    sr.add_argument("--username", required=True)
    sr.add_argument("--import", dest="adopt", action="store_true",
                    help="Adopt an existing remote user that has no local state")

    sd = sub.add_parser("delete", help="Delete a user")
    sd.add_argument("--username", required=True)

    args = parser.parse_args()

    if not args.cmd:
        parser.print_help()
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    settings.state_dir = args.state_dir

    if args.cmd == "apply":
        try:
            declared = load_declared(args.file)
        except (OSError, ValueError) as e:
            print(f"[apply] Error: {e}", file=sys.stderr)
            sys.exit(1)
        username = declared.username
    else:
        username = args.username

    state_path = settings.state_file(username)
    state = load_state(state_path)
    if state.exists and state.id != username:
        print(
            f"[{args.cmd}] Error: {state_path} holds state for {state.id!r}, not {username!r}",
            file=sys.stderr,
        )
        sys.exit(1)

    if args.cmd == "read" and not state.exists and not args.adopt:
        print(f"[read] No stored state for '{username}'; pass --import to adopt it", file=sys.stderr)
        return

    family = ""
    changed_fields: List[str] = []
    adopted = False
    if args.cmd == "apply":
        event = "user_update" if state.exists else "user_create"
    else:
        event = f"user_{args.cmd}"

    try:
        client = create_client(args.es_url, version=args.es_version, timeout=args.timeout)
        reconciler = UserReconciler(client)
        family = reconciler.adapter.family

        if args.cmd == "apply":
            changed_fields = sorted(diff_fields(declared, state))
            if state.exists:
                reconciler.update(state, declared, changed_fields)
            else:
                reconciler.create(state, declared)
        elif args.cmd == "read":
            if not state.exists:
                state.set_id(username)
                adopted = True
            reconciler.read(state)
            if not state.exists:
                event = "user_gone"
        else:
            if not state.exists:
                state.set_id(username)
            reconciler.delete(state)
    except FAILURES as e:
        print(f"[{args.cmd}] Error: {e}", file=sys.stderr)
        if adopted:
            state.clear()
        save_state(state_path, state)
        audit.safe_log_user_event(
            event,
            username,
            operator=args.operator,
            cluster=args.es_url,
            family=family,
            changed_fields=changed_fields,
            error=str(e),
            success=False,
        )
        sys.exit(1)

    save_state(state_path, state)
    audit.safe_log_user_event(
        event,
        username,
        operator=args.operator,
        cluster=args.es_url,
        family=family,
        changed_fields=changed_fields,
        success=True,
    )
    print(f"[{args.cmd}] {event} '{username}'", file=sys.stderr)
    if state.exists:
        print(json.dumps(_public_view(state), indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
