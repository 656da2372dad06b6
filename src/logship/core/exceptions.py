"""
Custom exceptions for logship.
"""

__all__ = [
    "LogshipError",
    "ConfigurationNotFound",
    "ConfigurationInvalid",
    "DiagnosticsBootstrapFailure",
    "SourceShutdownFailure",
    "AssemblyError",
]


class LogshipError(Exception):
    """Base exception for all logship errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigurationNotFound(LogshipError):
    """Raised when the configuration path is neither a file nor a directory."""

    def __init__(self, message: str, path: str | None = None):
        details = {}
        if path is not None:
            details["path"] = path
        super().__init__(message, details)
        self.path = path


class ConfigurationInvalid(LogshipError):
    """Raised when a configuration document does not have the expected shape."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        config_key: str | None = None,
    ):
        details = {}
        if path is not None:
            details["path"] = path
        if config_key is not None:
            details["config_key"] = config_key
        super().__init__(message, details)
        self.path = path
        self.config_key = config_key


class DiagnosticsBootstrapFailure(LogshipError):
    """Raised when the diagnostics log directory cannot be created or opened."""

    def __init__(self, message: str, log_directory: str | None = None):
        details = {}
        if log_directory is not None:
            details["log_directory"] = log_directory
        super().__init__(message, details)
        self.log_directory = log_directory


class SourceShutdownFailure(LogshipError):
    """
    Wraps an error raised by a source's stop operation.

    Never escapes the orchestrator: it is logged and shutdown continues
    with the remaining sources.
    """

    def __init__(self, message: str, source_name: str | None = None):
        details = {}
        if source_name is not None:
            details["source"] = source_name
        super().__init__(message, details)
        self.source_name = source_name


class AssemblyError(LogshipError):
    """Raised when a source or sink cannot be constructed during assembly."""

    def __init__(self, message: str, kind: str | None = None, index: int | None = None):
        details = {}
        if kind is not None:
            details["kind"] = kind
        if index is not None:
            details["index"] = index
        super().__init__(message, details)
        self.kind = kind
        self.index = index
