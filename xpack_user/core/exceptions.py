"""Exceptions raised by the user reconciliation core."""


class XPackUserError(Exception):
    """Base exception for all user reconciliation failures."""
    pass


class EncodingError(XPackUserError):
    """User body could not be translated to or from its wire form.

    Raised for malformed metadata JSON on the way out and for metadata the
    translator cannot represent on the way back.
    """
    pass


class UnsupportedOperationError(XPackUserError):
    """Operation is not available for the client family in use.

    Attributes:
        operation: Name of the attempted operation
        family: Client family label (e.g. "elastic5")
    """

    def __init__(self, operation: str, family: str):
        self.operation = operation
        self.family = family
        super().__init__(f"{operation} is unsupported in {family} client")


class UnsupportedClientError(XPackUserError):
    """Client handle or cluster version matches no known client family."""
    pass
