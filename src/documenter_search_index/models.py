"""Data models for documentation search indexes."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_VARIABLE = "documenterSearchIndex"

# Serialisation order of entry fields
ENTRY_FIELDS = ("location", "page", "title", "text", "category")

NON_DOCSTRING_CATEGORIES = frozenset({"section", "page"})


@dataclass(frozen=True)
class DocumentEntry:
    """One indexed fragment of a documentation page."""

    location: str
    page: str
    title: str
    text: str
    category: str

    @property
    def path(self) -> str:
        """Location without the fragment identifier."""
        return self.location.partition("#")[0]

    @property
    def anchor(self) -> str:
        """Fragment identifier, empty when the location has none."""
        return self.location.partition("#")[2]

    @property
    def is_docstring(self) -> bool:
        """Whether the entry documents a code object rather than prose."""
        return self.category not in NON_DOCSTRING_CATEGORIES

    def to_dict(self) -> dict[str, str]:
        """Return the entry as a mapping in serialisation order.

        Returns:
            Dictionary keyed by entry field names.
        """
        return {name: getattr(self, name) for name in ENTRY_FIELDS}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocumentEntry":
        """Build an entry from a decoded JSON object.

        Args:
            data: Mapping with the entry fields. A missing ``text`` is treated as empty.

        Returns:
            DocumentEntry instance.
        """
        return cls(
            location=data["location"],
            page=data["page"],
            title=data["title"],
            text=data.get("text", ""),
            category=data["category"],
        )


@dataclass
class SearchIndex:
    """Ordered collection of document entries."""

    docs: list[DocumentEntry] = field(default_factory=list)
    variable: str | None = DEFAULT_VARIABLE

    def __len__(self) -> int:
        return len(self.docs)

    def __iter__(self) -> Iterator[DocumentEntry]:
        return iter(self.docs)

    def pages(self) -> list[str]:
        """Return distinct page titles in first-appearance order."""
        return list(dict.fromkeys(entry.page for entry in self.docs))

    def by_category(self) -> dict[str, list[DocumentEntry]]:
        """Group entries by category, preserving order within each group."""
        groups: dict[str, list[DocumentEntry]] = {}
        for entry in self.docs:
            groups.setdefault(entry.category, []).append(entry)
        return groups

    def find(self, location: str) -> list[DocumentEntry]:
        """Return all entries with the given location."""
        return [entry for entry in self.docs if entry.location == location]


@dataclass(frozen=True)
class ValidationIssue:
    """A problem found while checking an index."""

    message: str
    position: int | None = None
    field: str | None = None
    severity: str = "error"

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def __str__(self) -> str:
        where = "index" if self.position is None else f"docs[{self.position}]"
        if self.field:
            where = f"{where}.{self.field}"
        return f"{self.severity}: {where}: {self.message}"


@dataclass(frozen=True)
class EntrySummary:
    """Signature and short description extracted from an entry's text."""

    signature: str | None
    description: str | None
    text: str


@dataclass
class BuildInfo:
    """A documentation build stored in the database."""

    name: str
    source: str | None
    variable: str | None
    entry_count: int
    imported_at: str


@dataclass
class StoredEntry:
    """A document entry as stored for a build."""

    build: str
    position: int
    entry: DocumentEntry
    signature: str | None
    summary: str | None
