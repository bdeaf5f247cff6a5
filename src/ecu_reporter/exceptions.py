# ecu_reporter/exceptions.py

from typing import Any, Dict, Optional


class ReporterError(Exception):
    """Base class for all ECU reporter errors."""

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ValidationError(ReporterError):
    """Raised when a request is missing a required field or carries an unsupported value."""
    pass


class ConfigurationError(ReporterError):
    """Raised when the reporter is not configured well enough to run."""
    pass


class ApiError(ReporterError):
    """Raised when the store or an upstream service answers with an error."""
    pass


class NetworkError(ReporterError):
    """Raised when a remote endpoint cannot be reached."""
    pass


class FileSystemError(ReporterError):
    """Raised when a document cannot be read from or written to disk."""
    pass


class DataError(ReporterError):
    """Raised when a stored row holds a value outside its closed enumeration."""
    pass


class ScanNotFoundError(ReporterError):
    """Raised when the requested scan does not exist in the store."""
    pass


class CVENotFoundError(ReporterError):
    """Raised when the NVD has no record for a CVE identifier."""
    pass


class UpstreamUnavailableError(ReporterError):
    """Raised when the NVD cannot be reached and no cached entry exists."""
    pass
