"""Well-formedness checks for documentation search indexes."""

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from documenter_search_index.models import DocumentEntry, SearchIndex, ValidationIssue

KNOWN_CATEGORIES = frozenset({"section", "page", "method", "function", "constant", "type", "macro", "module"})

# Docstring entries of these kinds always carry a signature or description
TEXT_REQUIRED_CATEGORIES = frozenset({"method", "function"})

REQUIRED_FIELDS = ("location", "page", "title", "category")


def validate(index: SearchIndex) -> list[ValidationIssue]:
    """Check every entry of a decoded index.

    Args:
        index: Search index to check.

    Returns:
        List of issues in entry order, empty when the index is well formed.
    """
    return _entry_issues(entry.to_dict() for entry in index.docs)


def validate_payload(payload: Any) -> list[ValidationIssue]:
    """Check a raw decoded JSON payload, including the container shape.

    Args:
        payload: Result of ``json.loads`` on the index body.

    Returns:
        List of issues. Container-level problems stop further checking.
    """
    issues = _container_issues(payload)
    if issues:
        return issues
    return _entry_issues(payload["docs"])


def structural_issues(payload: Any) -> list[ValidationIssue]:
    """Return only the problems that make a payload undecodable.

    Args:
        payload: Result of ``json.loads`` on the index body.

    Returns:
        List of error-level issues about shape and field types.
    """
    issues = _container_issues(payload)
    if issues:
        return issues
    for position, item in enumerate(payload["docs"]):
        issues.extend(_structure_issues(position, item))
    return issues


def has_errors(issues: Iterable[ValidationIssue]) -> bool:
    """Return whether any issue is error-level."""
    return any(issue.is_error for issue in issues)


def _container_issues(payload: Any) -> list[ValidationIssue]:
    if not isinstance(payload, dict):
        return [ValidationIssue(f"container must be an object, got {_type_name(payload)}")]
    keys = list(payload)
    if keys != ["docs"]:
        return [ValidationIssue(f"container must have exactly one key 'docs', got {keys}")]
    if not isinstance(payload["docs"], list):
        return [ValidationIssue(f"'docs' must be a sequence, got {_type_name(payload['docs'])}", field="docs")]
    return []


def _entry_issues(items: Iterable[Any]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    first_seen: dict[str, int] = {}
    for position, item in enumerate(items):
        problems = list(_structure_issues(position, item))
        if problems:
            issues.extend(problems)
            continue

        entry = DocumentEntry.from_dict(item)
        issues.extend(_content_issues(position, entry))

        # Page-level locations ("page.html#") legitimately repeat
        if entry.anchor:
            first = first_seen.setdefault(entry.location, position)
            if first != position:
                issues.append(
                    ValidationIssue(
                        f"duplicate location, first seen at docs[{first}]",
                        position=position,
                        field="location",
                        severity="warning",
                    )
                )
    return issues


def _structure_issues(position: int, item: Any) -> Iterator[ValidationIssue]:
    if not isinstance(item, Mapping):
        yield ValidationIssue(f"entry must be an object, got {_type_name(item)}", position=position)
        return

    for name in REQUIRED_FIELDS:
        value = item.get(name)
        if value is None:
            yield ValidationIssue("missing or null", position=position, field=name)
        elif not isinstance(value, str):
            yield ValidationIssue(f"must be a string, got {_type_name(value)}", position=position, field=name)

    text = item.get("text", "")
    if not isinstance(text, str):
        yield ValidationIssue(f"must be a string, got {_type_name(text)}", position=position, field="text")


def _content_issues(position: int, entry: DocumentEntry) -> Iterator[ValidationIssue]:
    for name in ("location", "title", "category"):
        if not getattr(entry, name).strip():
            yield ValidationIssue("is empty", position=position, field=name, severity="warning")

    if entry.category in TEXT_REQUIRED_CATEGORIES and not entry.text.strip():
        yield ValidationIssue(
            f"must not be empty for {entry.category} entries",
            position=position,
            field="text",
        )

    if entry.category and entry.category not in KNOWN_CATEGORIES:
        yield ValidationIssue(
            f"unknown category {entry.category!r}",
            position=position,
            field="category",
            severity="warning",
        )


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__
