"""
Custom exceptions for the tracker engine.
Raised inside the core and caught at its boundaries; none of them reach the UI layer.
"""


class TrackerException(Exception):
    """Base exception for the tracker engine"""
    pass


class StorageUnavailableException(TrackerException):
    """Raised when the durable storage backend cannot be read or written"""
    def __init__(self, operation: str, details: str):
        self.operation = operation
        self.details = details
        super().__init__(f"Storage {operation} failed: {details}")


class MalformedStorageException(TrackerException):
    """Raised when persisted data has an unexpected shape"""
    def __init__(self, key: str, details: str):
        self.key = key
        self.details = details
        super().__init__(f"Malformed payload under {key}: {details}")


class RemoteSyncException(TrackerException):
    """Raised when a remote store call fails (network error or non-2xx)"""
    def __init__(self, operation: str, details: str, status_code: int = None):
        self.operation = operation
        self.details = details
        self.status_code = status_code
        super().__init__(f"Remote {operation} failed: {details}")


class InvalidDateException(TrackerException):
    """Raised when a calendar date string is invalid"""
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid calendar date: {value}. Expected YYYY-MM-DD")


class UnknownCategoryException(TrackerException):
    """Raised when a checklist category key is not one of the tracked acts"""
    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Unknown checklist category: {category}")
