from typing import List, Optional


class FinboardError(Exception):
    """Base class for errors raised by the reporting core."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParameterValidationError(FinboardError):
    """A client-supplied parameter is malformed or out of range."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        return {"error": self.message, "field": self.field}


class InvalidColumnsError(ParameterValidationError):
    def __init__(self, columns: List[str], valid: Optional[List[str]] = None):
        message = f"Invalid columns: {', '.join(columns)}"
        if valid:
            message += f". Valid columns: {', '.join(valid)}"
        super().__init__("columns", message)
        self.columns = columns


class NoDataError(FinboardError):
    """The filtered result set is empty where at least one row is required."""


class AnalyticsCancelled(FinboardError):
    """The caller went away before the analytics passes completed."""
