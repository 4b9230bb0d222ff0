"""SurfSight device operations.

Packages:
    api: Upstream client, endpoint wrappers, sessions and errors
    batch: Batch validate/billing/quality operations and the HTTP API
"""
