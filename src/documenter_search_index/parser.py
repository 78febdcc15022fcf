"""Extraction of signatures and summaries from search index entry text."""

import logging
import re

import docutils.frontend  # type: ignore[import-untyped]
import docutils.nodes  # type: ignore[import-untyped]
import docutils.parsers.rst  # type: ignore[import-untyped]
import docutils.utils  # type: ignore[import-untyped]

from documenter_search_index.models import DocumentEntry, EntrySummary

logger = logging.getLogger(__name__)

# Single-line call or binding: rad2sec(rad), iau1980, @macro, Base.push!(a, b)::Vector, f(x::T) where T
_SIGNATURE_RE = re.compile(
    r"^@?[^\W\d]\w*(?:\.[^\W\d]\w*)*!?"
    r"(?:\{.*\})?"
    r"(?:\(.*\))?"
    r"(?:\s*::\s*\S+)?"
    r"(?:\s+where\s+.+)?$"
)


class BlockVisitor(docutils.nodes.GenericNodeVisitor):  # type: ignore[misc]
    """Visitor collecting the plain text of top-level body elements."""

    def __init__(self, document: docutils.nodes.document) -> None:
        """Initialise block visitor.

        Args:
            document: Docutils document tree.
        """
        super().__init__(document)
        self.blocks: list[str] = []

    def visit_comment(self, node: docutils.nodes.comment) -> None:
        """Skip comments.

        Args:
            node: Comment node.

        Raises:
            docutils.nodes.SkipNode: Always raised to skip comments.
        """
        raise docutils.nodes.SkipNode

    def visit_system_message(self, node: docutils.nodes.system_message) -> None:
        """Skip parser diagnostics.

        Args:
            node: System message node.

        Raises:
            docutils.nodes.SkipNode: Always raised to skip diagnostics.
        """
        raise docutils.nodes.SkipNode

    def default_visit(self, node: docutils.nodes.Node) -> None:
        """Collect top-level nodes and skip their children.

        Args:
            node: Any node.

        Raises:
            docutils.nodes.SkipNode: After collecting a top-level node.
        """
        if node.parent is not self.document:
            return
        text = _normalise(node.astext())
        if text:
            self.blocks.append(text)
        raise docutils.nodes.SkipNode

    def default_departure(self, node: docutils.nodes.Node) -> None:
        """Default departure handler (no-op).

        Args:
            node: Any node.
        """


class EntryTextParser:
    """Parses the free-form text of index entries."""

    def __init__(self) -> None:
        settings = docutils.frontend.get_default_settings(docutils.parsers.rst.Parser)
        settings.report_level = 5  # Suppress warnings
        settings.halt_level = 5
        settings.file_insertion_enabled = False
        settings.raw_enabled = False
        self._settings = settings
        self._parser = docutils.parsers.rst.Parser()

    def parse(self, entry: DocumentEntry) -> EntrySummary:
        """Extract signature and description from an entry.

        Docstring entries usually start with a call signature followed by a
        prose paragraph; other entries only carry prose.

        Args:
            entry: Entry whose text is parsed.

        Returns:
            EntrySummary for the entry.
        """
        blocks = self.split_blocks(entry.text)
        if not blocks:
            return EntrySummary(signature=None, description=None, text="")

        text = " ".join(blocks)
        if entry.is_docstring and _SIGNATURE_RE.match(blocks[0]):
            description = blocks[1] if len(blocks) > 1 else None
            return EntrySummary(signature=blocks[0], description=description, text=text)
        return EntrySummary(signature=None, description=blocks[0], text=text)

    def split_blocks(self, text: str) -> list[str]:
        """Split text into whitespace-normalised top-level blocks.

        Args:
            text: Entry text.

        Returns:
            Non-empty blocks in document order.
        """
        if not text.strip():
            return []
        try:
            doctree = self._parse_rst(text)
        except Exception:
            logger.debug("Falling back to blank-line splitting", exc_info=True)
            return [block for block in map(_normalise, re.split(r"\n\s*\n", text)) if block]

        visitor = BlockVisitor(doctree)
        doctree.walk(visitor)
        return visitor.blocks

    def _parse_rst(self, source: str) -> docutils.nodes.document:
        """Parse text into a docutils document tree.

        Args:
            source: Text to parse.

        Returns:
            Docutils document tree.
        """
        document = docutils.utils.new_document("<entry>", self._settings)
        self._parser.parse(source, document)
        return document


def _normalise(text: str) -> str:
    return " ".join(text.split())
