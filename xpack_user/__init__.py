"""Elasticsearch X-Pack security user reconciliation.

To reconcile a user:
    from xpack_user.core.reconciler import UserReconciler

To build a client for a cluster:
    from xpack_user.core.elastic import create_client
"""
