"""Cache exceptions."""

from .base import CodegaugeError


class CacheError(CodegaugeError):
    """Raised when the persistent cache cannot be read or written.

    AnalysisCache handles this internally by falling back to memory-only
    operation; it is not expected to reach callers.
    """

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Cache {operation} failed",
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation
        self.reason = reason
