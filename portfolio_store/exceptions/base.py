from typing import Any, Dict, Optional


class PortfolioStoreError(Exception):
    """Base exception for every error raised by the portfolio store.

    Attributes:
        message: Human-readable error message
        original_error: The boto3/pydantic exception underneath, if any
        context: Identifiers and codes describing where the error happened
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.original_error = original_error
        self.context = context or {}
        super().__init__(message)

    @property
    def error_type(self) -> str:
        """Stable name callers can switch on (e.g., when mapping to HTTP status)."""
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """Serializable summary of the error, without the original exception."""
        return {
            'error': self.error_type,
            'message': self.message,
            'context': {k: v for k, v in self.context.items()},
        }

    def __str__(self) -> str:
        if not self.context:
            return self.message
        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} (Context: {context_str})"

    def __repr__(self) -> str:
        return f"{self.error_type}(message={self.message!r}, original_error={self.original_error!r}, context={self.context!r})"
