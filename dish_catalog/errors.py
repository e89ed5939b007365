from __future__ import annotations


class CatalogError(Exception):
    """Base class for failures raised by the catalog core."""


class StoreReadError(CatalogError):
    """A backing collection could not be read or has the wrong shape."""


class EmailExistsError(CatalogError):
    def __init__(self, email: str) -> None:
        super().__init__(f"User with email {email!r} already exists")
        self.email = email


class InvalidTokenError(CatalogError):
    """Token is malformed, carries a bad signature, or has expired."""


class InvalidSortKeyError(CatalogError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Cannot sort by unknown attribute {key!r}")
        self.key = key


class PasswordTooLongError(CatalogError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"Password must be at most {limit} bytes")
        self.limit = limit
