class StoreError(Exception):
    """Base error for request-scoped failures; carries the HTTP status to answer with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientError(StoreError):
    status_code = 400


class UnknownType(ClientError):
    def __init__(self, type_name: str):
        super().__init__(f"Unknown or unsupported API Type for file operations: {type_name}")
        self.type_name = type_name


class NotFound(StoreError):
    status_code = 404


class StorageCorruption(StoreError):
    """Stored file could not be parsed, or its root shape contradicts its format."""


class StorageWriteError(StoreError):
    pass


class FormatError(Exception):
    """Raised at startup when a format file is missing fields or unparseable."""
