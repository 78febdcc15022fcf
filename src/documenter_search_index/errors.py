"""Exception hierarchy for search index operations."""


class SearchIndexError(Exception):
    """Base exception for all search index errors."""


class SearchIndexFormatError(SearchIndexError, ValueError):
    """Raised when a search index payload cannot be decoded.

    Attributes:
        position: Index of the offending entry, if any.
        field: Name of the offending entry field, if any.
    """

    def __init__(self, message: str, position: int | None = None, field: str | None = None) -> None:
        """Initialise format error.

        Args:
            message: Description of the problem.
            position: Index of the offending entry in ``docs``.
            field: Name of the offending field.
        """
        self.message = message
        self.position = position
        self.field = field
        if position is not None:
            where = f"docs[{position}]" + (f".{field}" if field else "")
            message = f"{where}: {message}"
        super().__init__(message)


class BuildNotFoundError(SearchIndexError, KeyError):
    """Raised when a named build is not present in the database."""

    def __init__(self, name: str) -> None:
        """Initialise with the missing build name.

        Args:
            name: Build name that was looked up.
        """
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Build not found: {self.name}"
