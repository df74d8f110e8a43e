"""Custom exceptions for the SimRec recommender.

Defines specific exception types so callers can tell a failed call apart from
a valid but empty result.
"""

from typing import Any, Dict, Optional


class SimRecError(Exception):
    """Base exception for SimRec errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidTrainingInputError(SimRecError, ValueError):
    """Raised when training cannot produce a model from the given input."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=f"Invalid training input: {message}", details=details)


class InternalConsistencyError(SimRecError, RuntimeError):
    """Raised when a model's feature map disagrees with its item index."""

    def __init__(self, item_index: int, num_vectors: int):
        message = (
            f"Expected exactly one feature vector for item index {item_index}, "
            f"found {num_vectors}"
        )
        super().__init__(
            message=message,
            details={"item_index": item_index, "num_vectors": num_vectors},
        )


class ModelNotFoundError(SimRecError, FileNotFoundError):
    """Raised when model files cannot be found."""

    def __init__(self, model_path: str, details: Optional[Dict[str, Any]] = None):
        message = f"Model not found at '{model_path}'. Please train a model first."
        super().__init__(
            message=message,
            details=details or {"model_path": model_path},
        )
