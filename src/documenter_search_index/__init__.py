"""Tools for documentation-site search index files."""

from documenter_search_index.codec import dump, dumps, load, loads
from documenter_search_index.errors import BuildNotFoundError, SearchIndexError, SearchIndexFormatError
from documenter_search_index.models import DocumentEntry, SearchIndex, ValidationIssue
from documenter_search_index.validator import validate

__all__ = [
    "BuildNotFoundError",
    "DocumentEntry",
    "SearchIndex",
    "SearchIndexError",
    "SearchIndexFormatError",
    "ValidationIssue",
    "dump",
    "dumps",
    "load",
    "loads",
    "validate",
]
