"""
Error types raised by the Wrap Studio raster core.

Each error subclasses the built-in exception callers would already catch,
so code written against plain ValueError/OSError keeps working.
"""


class DecodeError(OSError):
    """A template or imported image could not be read or decoded."""


class InvalidParameter(ValueError):
    """A numeric or structural parameter is outside its accepted range."""


class OperationCancelled(RuntimeError):
    """A long-running pixel pass was stopped through its CancelToken."""


class CancelToken:
    """
    Cooperative cancellation flag checked between rows of a pixel pass.

    Example:
        >>> token = CancelToken()
        >>> token.cancel()
        >>> token.raise_if_cancelled()
        Traceback (most recent call last):
        ...
        OperationCancelled: operation cancelled
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self, operation: str = "operation") -> None:
        if self._cancelled:
            raise OperationCancelled(f"{operation} cancelled")
