"""Routing: method-name compilation and a compiled route table.

Routes are registered by ``bootstrap()`` and compiled into an immutable
lookup structure before the server is returned.
"""
