"""
Exceptions raised by the CRUD store client.
"""


class CrudStoreException(Exception):
    """Base exception for CRUD store operations."""

    pass


class ProtocolError(CrudStoreException):
    """Exception raised when a response or stream frame breaks the wire contract."""

    pass


class ServerError(CrudStoreException):
    """Exception raised when the server answers with an explicit error payload."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnknownEntity(CrudStoreException):
    """Exception raised when a key does not resolve to a known entity."""

    def __init__(self, key: str):
        super().__init__(f"Unknown entity: {key}")
        self.key = key


class TransportError(CrudStoreException):
    """Exception raised when the HTTP request itself fails."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url
