"""Tests for entry text parsing."""

from unittest.mock import patch

import pytest

from documenter_search_index.models import DocumentEntry, EntrySummary
from documenter_search_index.parser import EntryTextParser


@pytest.fixture
def parser() -> EntryTextParser:
    """Create an EntryTextParser instance.

    Returns:
        EntryTextParser instance.
    """
    return EntryTextParser()


def make_entry(text: str, category: str = "method") -> DocumentEntry:
    return DocumentEntry(
        location="modules/util.html#AstroBase.Util.rad2sec-Tuple{Any}",
        page="Utilities",
        title="AstroBase.Util.rad2sec",
        text=text,
        category=category,
    )


def test_parse_method_entry(parser: EntryTextParser) -> None:
    """Test extracting signature and description from a method docstring."""
    text = (
        "rad2sec(rad)\n\nConvert an angle in radians to arcseconds.\n\nExample\n\n"
        "julia> rad2sec(0.5235987755982988)\n107999.99999999999\n\n\n\n\n\n"
    )

    summary = parser.parse(make_entry(text))

    assert summary.signature == "rad2sec(rad)"
    assert summary.description == "Convert an angle in radians to arcseconds."
    assert "julia> rad2sec(0.5235987755982988) 107999.99999999999" in summary.text


def test_parse_constant_entry(parser: EntryTextParser) -> None:
    """Test that backquoted names are unwrapped."""
    text = (
        "`iau1980`\n\nThe singleton instance of type IAU1980, representing the IAU 1980 family of models.\n\n\n\n\n\n"
    )

    summary = parser.parse(make_entry(text, category="constant"))

    assert summary.signature == "iau1980"
    assert summary.description == "The singleton instance of type IAU1980, representing the IAU 1980 family of models."


def test_parse_multi_argument_signature(parser: EntryTextParser) -> None:
    """Test signatures with several arguments."""
    text = "transform(from, to, a, ecc)\n\nTransform anomaly a from one anomaly type to another."

    summary = parser.parse(make_entry(text))

    assert summary.signature == "transform(from, to, a, ecc)"
    assert summary.description == "Transform anomaly a from one anomaly type to another."


def test_parse_docstring_without_signature(parser: EntryTextParser) -> None:
    """Test that prose-first docstrings have no signature."""
    summary = parser.parse(make_entry("Compute the thing.\n\nMore details.", category="function"))

    assert summary.signature is None
    assert summary.description == "Compute the thing."


def test_parse_signature_only(parser: EntryTextParser) -> None:
    """Test a docstring consisting of a signature alone."""
    summary = parser.parse(make_entry("sec2rad(sec)\n\n\n\n"))

    assert summary == EntrySummary(signature="sec2rad(sec)", description=None, text="sec2rad(sec)")


@pytest.mark.parametrize("text", ["Deprecated.\n\nUse g.", "See also: g.\n\nUse g.", "1.5\n\nUse g."])
def test_parse_short_prose_is_not_a_signature(parser: EntryTextParser, text: str) -> None:
    """Test that a short opening sentence is kept as the description."""
    summary = parser.parse(make_entry(text, category="function"))

    assert summary.signature is None
    assert summary.description == text.split("\n")[0]


@pytest.mark.parametrize(
    "signature",
    [
        "convert(::Type{T}, x) where {T<:Real}",
        "push!(a, b)",
        "Base.show(io, x)::Nothing",
        "Vector{T}(n)",
    ],
)
def test_parse_julia_signatures(parser: EntryTextParser, signature: str) -> None:
    """Test qualified, mutating, parametric and ``where`` signatures."""
    summary = parser.parse(make_entry(f"{signature}\n\nDo the thing."))

    assert summary.signature == signature
    assert summary.description == "Do the thing."


def test_parse_page_entry(parser: EntryTextParser) -> None:
    """Test that prose entries never get a signature."""
    summary = parser.parse(make_entry("Modules = [AstroBase.Constants]\nPrivate = false", category="page"))

    assert summary.signature is None
    assert summary.description == "Modules = [AstroBase.Constants] Private = false"


def test_parse_single_word_page_entry(parser: EntryTextParser) -> None:
    """Test that signature detection only applies to docstring entries."""
    summary = parser.parse(make_entry("Overview", category="page"))

    assert summary.signature is None
    assert summary.description == "Overview"


def test_parse_empty_text(parser: EntryTextParser) -> None:
    """Test parsing an entry without text."""
    summary = parser.parse(make_entry("", category="section"))

    assert summary == EntrySummary(signature=None, description=None, text="")


def test_split_blocks_skips_comments(parser: EntryTextParser) -> None:
    """Test that comments are excluded from blocks."""
    blocks = parser.split_blocks(".. a hidden comment\n\nVisible text.")

    assert blocks == ["Visible text."]


def test_split_blocks_normalises_whitespace(parser: EntryTextParser) -> None:
    """Test that line breaks inside a block collapse to spaces."""
    blocks = parser.split_blocks("first line\nsecond   line\n\nnext block")

    assert blocks == ["first line second line", "next block"]


def test_split_blocks_fallback(parser: EntryTextParser) -> None:
    """Test splitting on blank lines when docutils fails."""
    with patch.object(parser, "_parse_rst", side_effect=RuntimeError("boom")):
        blocks = parser.split_blocks("one\n\n  \ntwo\nthree")

    assert blocks == ["one", "two three"]
