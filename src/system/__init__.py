"""External collaborator services.

This package wraps filesystem copies, pkg-config queries, and the
dynamic linker cache behind small interfaces the store depends on.
"""
