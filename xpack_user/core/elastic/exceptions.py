"""Per-family transport errors returned by the Elasticsearch clients."""
from __future__ import annotations
from typing import Optional


class ElasticError(Exception):
    """HTTP error from an Elasticsearch cluster.

    Attributes:
        status: HTTP status code
        error_type: ``error.type`` from the response body, if any
        reason: ``error.reason`` from the response body, or raw text
        url: Request URL that failed
    """

    def __init__(self, status: int, reason: str, url: str, error_type: Optional[str] = None):
        self.status = status
        self.reason = reason
        self.url = url
        self.error_type = error_type
        super().__init__(f"[{status}] {url}: {reason}")


class Elastic7Error(ElasticError):
    """Error raised by the 7.x client."""
    pass


class Elastic6Error(ElasticError):
    """Error raised by the 6.x client."""
    pass


class Elastic5Error(ElasticError):
    """Error raised by the 5.x client."""
    pass
