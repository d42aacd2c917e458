from typing import Optional, Dict, Any


class AppException(Exception):
    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)


class DiscoveryError(AppException):
    def __init__(self, message: str = "Failed to list log sources"):
        super().__init__(message, "DISCOVERY_ERROR")


class SelectionError(AppException):
    pass


class NoSourcesAvailableError(SelectionError):
    def __init__(self):
        super().__init__("No sources to tail logs from", "NO_SOURCES_AVAILABLE")


class SelectionNotFoundError(SelectionError):
    def __init__(self, sub_source: str, source: str):
        super().__init__(
            f"[{sub_source}] is not a valid stream in source [{source}]",
            "SELECTION_NOT_FOUND",
            {"sub_source": sub_source, "source": source}
        )


class StreamError(AppException):
    def __init__(self, message: str, code: str, source: str, sub_source: str):
        super().__init__(message, code, {"source": source, "sub_source": sub_source})
        self.source = source
        self.sub_source = sub_source


class StreamOpenError(StreamError):
    def __init__(self, source: str, sub_source: str, reason: str):
        super().__init__(
            f"Failed to open {sub_source} of {source}: {reason}",
            "STREAM_OPEN_ERROR",
            source,
            sub_source
        )


class StreamReadError(StreamError):
    def __init__(self, source: str, sub_source: str, reason: str):
        super().__init__(
            f"Failed to read {sub_source} of {source}: {reason}",
            "STREAM_READ_ERROR",
            source,
            sub_source
        )


class SinkWriteError(AppException):
    def __init__(self, reason: str):
        super().__init__(f"Failed to write log output: {reason}", "SINK_WRITE_ERROR")
