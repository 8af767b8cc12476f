"""Error taxonomy for document decomposition.

Page-level failures and unsupported images are NOT errors: they are recorded as
warnings on the result. Only whole-document problems are raised.
"""
from __future__ import annotations


class DecomposeError(Exception):
    """Base class for decomposition errors."""


class DocumentUnreadableError(DecomposeError):
    """The document could not be opened at all (corrupt, truncated, wrong format)."""


class PasswordProtectedError(DocumentUnreadableError):
    """The document is encrypted and cannot be processed without a password."""


class UploadRejectedError(DecomposeError, ValueError):
    """Caller-side guard: extension not allowed or file too large."""
