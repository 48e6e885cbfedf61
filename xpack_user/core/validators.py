"""Input validation helpers for declared users."""
from __future__ import annotations

USERNAME_MIN_LENGTH = 1
USERNAME_MAX_LENGTH = 1024
PASSWORD_MIN_LENGTH = 6


def validate_username(raw: str) -> str:
    """Validate a security username.

    Args:
        raw: Username as declared

    Returns:
        The username, unchanged

    Raises:
        ValueError: If username is invalid
    """
    if not (USERNAME_MIN_LENGTH <= len(raw) <= USERNAME_MAX_LENGTH):
        raise ValueError(
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters"
        )
    if raw != raw.strip():
        raise ValueError("Username cannot start or end with whitespace")
    # Printable Basic Latin only
    if any(not (" " <= char <= "~") for char in raw):
        raise ValueError("Username contains non-printable or non-ASCII characters")

    return raw


def validate_password(password: str) -> str:
    """Validate a plaintext password.

    Raises:
        ValueError: If password is too short
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    return password


def validate_roles(roles) -> list[str]:
    """Normalize roles to a sorted list of non-empty names.

    Raises:
        ValueError: If roles is not a list of strings or is empty
    """
    if isinstance(roles, str) or not isinstance(roles, (list, tuple, set)):
        raise ValueError("roles must be a list of role names")
    cleaned = sorted({role.strip() for role in roles if isinstance(role, str) and role.strip()})
    if not cleaned:
        raise ValueError("At least one role is required")
    return cleaned
