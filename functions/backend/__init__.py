"""
Backend package for the band site.

This package provides the server actions behind the public site and the
admin dashboard, a FastAPI application exposing them over HTTP, and the
store, storage, cache, auth and mail adapters they run against.
"""
