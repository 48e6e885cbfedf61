"""Core reconciliation logic for Elasticsearch security users.

Module Structure:
    - elastic/            : Low-level HTTP clients per cluster generation
    - models.py           : DeclaredUser, UserSnapshot, ResourceState
    - user_transformer.py : Declared user ⇄ wire body ⇄ snapshot
    - adapters.py         : Version adapters, dispatch and not-found classification
    - reconciler.py       : Create/read/update/delete state machine
    - validators.py       : Input validation for declared users
    - exceptions.py       : EncodingError, UnsupportedOperationError, UnsupportedClientError

Usage Pattern:
    from xpack_user.core.elastic import create_client
    from xpack_user.core.models import DeclaredUser, ResourceState
    from xpack_user.core.reconciler import UserReconciler
"""
