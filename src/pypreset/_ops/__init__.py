"""Primitive apply/remove/read/verify operators, one module per parameter type.

Every operator returns a plain ``bool`` (``str | None`` for ``read``):
collaborator failures are caught and logged here and never re-raised.
"""
