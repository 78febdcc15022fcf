"""Importer for search index files of published documentation builds."""

import logging
import subprocess
import tempfile
from pathlib import Path

from documenter_search_index import codec
from documenter_search_index.database import SearchIndexDatabase
from documenter_search_index.errors import SearchIndexFormatError
from documenter_search_index.validator import validate

logger = logging.getLogger(__name__)


class SearchIndexImporter:
    """Imports ``search_index.js`` files from a documentation tree or a git branch.

    Published documentation usually keeps one directory per build
    (``stable``, ``dev``, ``v1.2.0``, ``previews/PR35``), each with its own
    search index file.
    """

    INDEX_FILENAME = "search_index.js"
    DEFAULT_BRANCH = "gh-pages"

    def __init__(self, database: SearchIndexDatabase, index_filename: str = INDEX_FILENAME) -> None:
        """Initialise importer with database instance.

        Args:
            database: SearchIndexDatabase instance for storing builds.
            index_filename: Name of the index files to look for.
        """
        self.database = database
        self.index_filename = index_filename

    def index_from_git(self, repo_url: str, branch: str = DEFAULT_BRANCH, shallow: bool = True) -> int:
        """Clone a documentation repository and import its search indexes.

        Args:
            repo_url: Git URL of the repository holding the built documentation.
            branch: Git branch to clone.
            shallow: Whether to do a shallow clone.

        Returns:
            Number of builds imported.
        """
        with tempfile.TemporaryDirectory() as temp_dir:
            repo_path = Path(temp_dir) / "docs"
            self._clone_repository(repo_url, repo_path, branch, shallow)
            return self._index_directory(repo_path)

    def index_from_path(self, path: Path) -> int:
        """Import search indexes from a local file or directory.

        Args:
            path: An index file, or a directory searched recursively.

        Returns:
            Number of builds imported.

        Raises:
            ValueError: If the path does not exist.
        """
        if path.is_file():
            return int(self._import_file(path, self._build_name(path, path.parent)))
        return self._index_directory(path)

    def rebuild_index(self, repo_url: str, branch: str = DEFAULT_BRANCH) -> int:
        """Clear existing builds and import again from scratch.

        Args:
            repo_url: Git URL of the documentation repository.
            branch: Git branch to import from.

        Returns:
            Number of builds imported.
        """
        logger.info("Clearing existing builds...")
        self.database.clear()
        return self.index_from_git(repo_url, branch)

    def _clone_repository(self, repo_url: str, target_path: Path, branch: str, shallow: bool) -> None:
        """Clone the documentation repository.

        Args:
            repo_url: Git URL to clone.
            target_path: Directory to clone into.
            branch: Git branch to clone.
            shallow: Whether to do a shallow clone.
        """
        cmd = ["git", "clone"]
        if shallow:
            cmd.extend(["--depth", "1", "--filter=blob:none", "--sparse"])
        cmd.extend(["--branch", branch, repo_url, str(target_path)])

        logger.info("Cloning %s (branch %s)...", repo_url, branch)
        subprocess.run(cmd, check=True, capture_output=True)  # noqa: S603

        # Only the index files are needed, at any depth
        if shallow:
            logger.info("Setting up sparse checkout for %s files...", self.index_filename)
            subprocess.run(  # noqa: S603
                ["git", "-C", str(target_path), "sparse-checkout", "set", "--no-cone", self.index_filename],  # noqa: S607
                check=True,
                capture_output=True,
            )
        logger.info("Repository cloned successfully")

    def _index_directory(self, docs_path: Path) -> int:
        """Import every search index file below a directory.

        Args:
            docs_path: Root of the documentation tree.

        Returns:
            Number of builds imported.

        Raises:
            ValueError: If the documentation path does not exist.
        """
        if not docs_path.exists():
            msg = f"Documentation path does not exist: {docs_path}"
            raise ValueError(msg)

        index_files = sorted(
            file_path
            for file_path in docs_path.rglob(self.index_filename)
            if ".git" not in file_path.relative_to(docs_path).parts
        )
        logger.info("Found %d search index files to import", len(index_files))

        imported_count = 0
        for file_path in index_files:
            if self._import_file(file_path, self._build_name(file_path, docs_path)):
                imported_count += 1

        logger.info("Successfully imported %d builds", imported_count)
        return imported_count

    def _import_file(self, file_path: Path, build: str) -> bool:
        """Decode one index file and store it as a build.

        Args:
            file_path: Path to the index file.
            build: Build name to store it under.

        Returns:
            True if the file was imported.
        """
        try:
            index = codec.load(file_path)
        except (OSError, UnicodeDecodeError, SearchIndexFormatError) as e:
            logger.warning("Failed to decode %s: %s", file_path, e)
            return False

        for issue in validate(index):
            logger.warning("%s: %s", file_path, issue)

        count = self.database.replace_build(build, index, source=str(file_path))
        logger.debug("Imported %s: %d entries", build, count)
        return True

    @staticmethod
    def _build_name(file_path: Path, root: Path) -> str:
        """Derive the build name from an index file's location.

        Args:
            file_path: Path to the index file.
            root: Root of the documentation tree.

        Returns:
            Directory relative to the root, or the root's own name for a top-level file.
        """
        relative = file_path.parent.relative_to(root)
        if relative.parts:
            return relative.as_posix()
        return root.resolve().name
