"""Reading and writing search index files.

The generator writes the index as a JSON object assigned to a JavaScript
variable::

    var documenterSearchIndex = {"docs":
    [{"location":"index.html#Home-1","page":"Home",...}]
    }

``dumps`` reproduces that layout exactly, so decoding and re-encoding a
generated file gives back the same bytes.
"""

import json
import re
from pathlib import Path
from typing import Any

from documenter_search_index.errors import SearchIndexFormatError
from documenter_search_index.models import DEFAULT_VARIABLE, DocumentEntry, SearchIndex
from documenter_search_index.validator import structural_issues

__all__ = ["DEFAULT_VARIABLE", "dump", "dumps", "load", "loads", "parse"]

_WRAPPER_RE = re.compile(r"^\s*var\s+([A-Za-z_$][\w$]*)\s*=\s*")


def parse(source: str) -> tuple[str | None, Any]:
    """Strip the variable assignment and decode the JSON body.

    Args:
        source: Wrapped (``var name = {...}``) or bare JSON index text.

    Returns:
        Tuple of the wrapper variable name (None for bare JSON) and the raw payload.

    Raises:
        SearchIndexFormatError: If the body is not valid JSON.
    """
    variable = None
    source = source.removeprefix("\ufeff")
    body = source
    match = _WRAPPER_RE.match(source)
    if match:
        variable = match.group(1)
        body = source[match.end() :]
    body = body.strip().rstrip(";")

    try:
        return variable, json.loads(body)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON in search index: {e}"
        raise SearchIndexFormatError(msg) from e


def loads(source: str) -> SearchIndex:
    """Decode a search index from text.

    Args:
        source: Wrapped (``var name = {...}``) or bare JSON index text.

    Returns:
        Decoded SearchIndex, remembering the wrapper variable name.

    Raises:
        SearchIndexFormatError: If the text is not a well-formed index.
    """
    variable, payload = parse(source)
    issues = structural_issues(payload)
    if issues:
        first = issues[0]
        raise SearchIndexFormatError(first.message, position=first.position, field=first.field)

    return SearchIndex(
        docs=[DocumentEntry.from_dict(item) for item in payload["docs"]],
        variable=variable,
    )


def dumps(index: SearchIndex) -> str:
    """Encode a search index in the generator's layout.

    Args:
        index: Search index to encode.

    Returns:
        Index text without a trailing newline.
    """
    entries = json.dumps(
        [entry.to_dict() for entry in index.docs],
        ensure_ascii=False,
        separators=(",", ":"),
    )
    payload = '{"docs":\n' + entries + "\n}"
    if index.variable:
        return f"var {index.variable} = {payload}"
    return payload


def load(path: Path) -> SearchIndex:
    """Read and decode a search index file.

    Args:
        path: Path to the index file.

    Returns:
        Decoded SearchIndex.
    """
    return loads(Path(path).read_text(encoding="utf-8"))


def dump(index: SearchIndex, path: Path) -> None:
    """Encode a search index and write it to a file.

    Args:
        index: Search index to write.
        path: Destination path. Parent directories are created.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(index), encoding="utf-8", newline="")
