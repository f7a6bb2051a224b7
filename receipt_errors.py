"""
Error taxonomy for receipt rendering.

Every failure raised while composing a receipt derives from ReceiptError so
callers can catch a single type and still branch on the cause.
"""

from typing import Optional


class ReceiptError(Exception):
    """Base class for all receipt rendering failures."""


class InputError(ReceiptError, ValueError):
    """Receipt input violates its contract (empty name, non-positive amount)."""


class AssetLoadError(ReceiptError):
    """An image reference could not be resolved to decodable image bytes."""

    def __init__(self, label: str, reference: object, reason: Optional[str] = None):
        self.label = label
        self.reference = reference
        self.reason = reason
        message = f"Could not load {label} image from {_describe(reference)}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RenderError(ReceiptError):
    """Internal geometry or sequencing invariant was violated."""


def _describe(reference: object) -> str:
    if isinstance(reference, (bytes, bytearray)):
        return f"<{len(reference)} bytes>"
    return repr(str(reference))
