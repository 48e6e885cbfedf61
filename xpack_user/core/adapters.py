"""Version adapters for the security user API.

Each supported client family gets one adapter with the same surface:
``put_user``, ``get_user``, ``delete_user`` and ``is_not_found``. Adapters
pass transport errors through untouched; deciding what an error means is
left to the caller via ``is_not_found``.

Architecture:
    UserReconciler ──> adapter_for(client) ──┬──> Elastic7UserAdapter ──> Elastic7Client
                                             ├──> Elastic6UserAdapter ──> Elastic6Client
                                             └──> Elastic5UserAdapter (unsupported)
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Tuple, Type, Union

from .elastic.client import Elastic5Client, Elastic6Client, Elastic7Client, ElasticClient
from .elastic.exceptions import ElasticError, Elastic5Error, Elastic6Error, Elastic7Error
from .exceptions import UnsupportedClientError, UnsupportedOperationError
from .models import UserSnapshot
from .user_transformer import decode_user

OPERATIONS = ("put_user", "get_user", "delete_user")


class UserAdapter(ABC):
    """Base adapter. Subclasses bind a client family and its error type."""

    family = "unknown"
    error_class: Type[ElasticError] = ElasticError

    def __init__(self, client: ElasticClient):
        self.client = client

    @abstractmethod
    def put_user(self, username: str, body: Union[bytes, str]) -> None:
        ...

    @abstractmethod
    def get_user(self, username: str) -> UserSnapshot:
        ...

    @abstractmethod
    def delete_user(self, username: str) -> None:
        ...

    def is_not_found(self, exc: BaseException) -> bool:
        """True if ``exc`` is this family's "resource not found" error."""
        return isinstance(exc, self.error_class) and exc.status == 404


class _SecurityUserAdapter(UserAdapter):
    """Shared implementation for families exposing the security user API."""

    def put_user(self, username: str, body: Union[bytes, str]) -> None:
        self.client.xpack_security_put_user(username, body)

    def get_user(self, username: str) -> UserSnapshot:
        res = self.client.xpack_security_get_user(username)
        return decode_user(res[username], username)

    def delete_user(self, username: str) -> None:
        self.client.xpack_security_delete_user(username)


class Elastic7UserAdapter(_SecurityUserAdapter):
    family = "elastic7"
    error_class = Elastic7Error


class Elastic6UserAdapter(_SecurityUserAdapter):
    family = "elastic6"
    error_class = Elastic6Error


class Elastic5UserAdapter(UserAdapter):
    """The 5.x client cannot manage users; every operation fails fast."""

    family = "elastic5"
    error_class = Elastic5Error

    def put_user(self, username: str, body: Union[bytes, str]) -> None:
        raise UnsupportedOperationError("put_user", self.family)

    def get_user(self, username: str) -> UserSnapshot:
        raise UnsupportedOperationError("get_user", self.family)

    def delete_user(self, username: str) -> None:
        raise UnsupportedOperationError("delete_user", self.family)


# Closed set of known families; order is irrelevant since the clients are siblings
_ADAPTERS: Tuple[Tuple[type, Type[UserAdapter]], ...] = (
    (Elastic7Client, Elastic7UserAdapter),
    (Elastic6Client, Elastic6UserAdapter),
    (Elastic5Client, Elastic5UserAdapter),
)


def adapter_for(client: Any) -> UserAdapter:
    """Return the adapter bound to ``client``'s family.

    Raises:
        UnsupportedClientError: If the client matches none of the known families
    """
    for client_type, adapter_class in _ADAPTERS:
        if isinstance(client, client_type):
            return adapter_class(client)
    raise UnsupportedClientError(f"unhandled client type: {type(client).__name__}")


def dispatch(client: Any, operation: str, *args: Any) -> Any:
    """Route one operation to the adapter for ``client``.

    Args:
        client: Client handle of any family
        operation: One of put_user, get_user, delete_user
        *args: Operation arguments

    Returns:
        Whatever the adapter returns; adapter errors propagate unchanged
    """
    if operation not in OPERATIONS:
        raise ValueError(f"unknown operation: {operation}")
    adapter = adapter_for(client)
    return getattr(adapter, operation)(*args)


def is_not_found(exc: BaseException, client: Any) -> bool:
    """Classify ``exc`` using the not-found predicate of ``client``'s family."""
    return adapter_for(client).is_not_found(exc)
