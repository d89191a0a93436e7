"""Stateful managers of the runtime.

Managers own process-level state (the current workspace) and raise domain
exceptions (``LookupError`` subclasses), never HTTP exceptions -- that
translation is the router's responsibility.
"""
