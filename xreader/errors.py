"""Exception types raised inside x-reader."""

from __future__ import annotations


class XReaderError(RuntimeError):
    """Base class for x-reader failures."""


class DiscoveryError(XReaderError):
    """Raised when query ID discovery finds no bundles or no identifiers."""


class DispatchError(XReaderError):
    """Raised when every candidate query ID for an operation has failed."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(message)
        self.operation = operation
