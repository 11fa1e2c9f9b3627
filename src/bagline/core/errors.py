from __future__ import annotations


class ValidationError(ValueError):
    """Input rejected before any store write.

    The message is user-facing and is shown as-is by the UI.
    """


class StoreError(RuntimeError):
    """The record store failed to complete a read or write."""
