"""Workspace tree engine: pure helpers, mutations and sanitization.

Nothing in this package performs I/O; persistence lives in
``boardshelf.runtime.persistence``.
"""
