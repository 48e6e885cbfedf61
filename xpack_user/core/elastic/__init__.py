"""Elasticsearch HTTP clients, one per supported cluster generation.

Architecture:
- client.py: Request plumbing and the Elastic7Client/Elastic6Client/Elastic5Client families
- exceptions.py: Per-family transport errors
"""
from .client import (
    ElasticClient,
    Elastic7Client,
    Elastic6Client,
    Elastic5Client,
    create_client,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    ElasticError,
    Elastic7Error,
    Elastic6Error,
    Elastic5Error,
)

__all__ = [
    # Clients
    "ElasticClient",
    "Elastic7Client",
    "Elastic6Client",
    "Elastic5Client",
    "create_client",
    "REQUEST_TIMEOUT",

    # Exceptions
    "ElasticError",
    "Elastic7Error",
    "Elastic6Error",
    "Elastic5Error",
]
