"""Error types shared by the Toolverse services."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ToolError:
    """Structured error information surfaced to the user."""
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


class ToolServiceError(Exception):
    """Base exception carrying a structured ToolError."""

    code = "UNKNOWN_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.error = ToolError(code=self.code, message=message, details=details or {})
        super().__init__(message)


class InvalidInputError(ToolServiceError):
    """Wrong file type, bad parameters; reported before any state changes."""
    code = "INVALID_INPUT"
    status_code = 400


class RangeExpressionError(InvalidInputError):
    """Malformed page range expression."""
    code = "INVALID_RANGE"


class EmptySelectionError(InvalidInputError):
    """Selection resolved to no pages."""
    code = "EMPTY_SELECTION"


class DocumentLoadError(ToolServiceError):
    """Corrupt or unsupported PDF."""
    code = "DECODE_ERROR"
    status_code = 422


class ConversionError(ToolServiceError):
    """Image could not be decoded or re-encoded."""
    code = "CONVERSION_ERROR"
    status_code = 422


class UpstreamError(ToolServiceError):
    """External service failed or was unreachable."""
    code = "UPSTREAM_ERROR"
    status_code = 502


class AssemblyError(ToolServiceError):
    """Copying or saving pages failed; the whole run is discarded."""
    code = "ASSEMBLY_ERROR"
    status_code = 500


class LoadCancelledError(ToolServiceError):
    """A newer load superseded this one."""
    code = "LOAD_CANCELLED"
    status_code = 409
