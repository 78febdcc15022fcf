"""Command-line interface for documentation search indexes.

Examples:

    Check generated index files:
        documenter-index validate build/search_index.js

    Import every build of a published site:
        documenter-index import --git https://github.com/org/Pkg.jl.git --db docs.db

    List the methods documented in a build:
        documenter-index show stable --category method --db docs.db
"""

import json
import logging
import sys
from pathlib import Path

import click

from documenter_search_index import codec
from documenter_search_index.database import SearchIndexDatabase
from documenter_search_index.errors import SearchIndexFormatError
from documenter_search_index.indexer import SearchIndexImporter
from documenter_search_index.logging_config import setup_logging
from documenter_search_index.validator import has_errors, validate_payload

logger = logging.getLogger(__name__)

DEFAULT_DB = "search-index.db"

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_DB,
    show_default=True,
    envvar="DOCUMENTER_INDEX_DB",
    help="SQLite database holding imported builds.",
)


@click.group(name="documenter-index")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors")
def main(verbose: bool, quiet: bool) -> None:
    """Inspect, normalise and store documentation search indexes."""
    setup_logging(verbose=verbose, quiet=quiet)


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--strict", is_flag=True, help="Treat warnings as failures")
def validate(files: tuple[Path, ...], strict: bool) -> None:
    """Check search index FILES for well-formedness.

    Exits with status 1 if any file has errors (or warnings with --strict).
    """
    failed = False
    for file_path in files:
        try:
            _, payload = codec.parse(file_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, SearchIndexFormatError) as e:
            click.echo(f"{file_path}: {e}", err=True)
            failed = True
            continue

        issues = validate_payload(payload)
        for issue in issues:
            click.echo(f"{file_path}: {issue}")
        if has_errors(issues) or (strict and issues):
            failed = True
        elif not issues:
            click.echo(f"{file_path}: ok")

    sys.exit(1 if failed else 0)


@main.command(name="format")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--check", is_flag=True, help="Report files that would change without writing them")
def format_(files: tuple[Path, ...], check: bool) -> None:
    """Rewrite search index FILES in canonical form."""
    failed = False
    for file_path in files:
        try:
            # Bytes, so that line endings and a BOM count as differences
            raw = file_path.read_bytes()
            index = codec.loads(raw.decode("utf-8"))
        except (OSError, UnicodeDecodeError, SearchIndexFormatError) as e:
            click.echo(f"{file_path}: {e}", err=True)
            failed = True
            continue

        if codec.dumps(index).encode("utf-8") == raw:
            logger.debug("%s is already canonical", file_path)
            continue

        if check:
            click.echo(f"would reformat {file_path}")
            failed = True
        else:
            codec.dump(index, file_path)
            click.echo(f"reformatted {file_path}")

    sys.exit(1 if failed else 0)


@main.command(name="import")
@click.argument("path", required=False, type=click.Path(exists=True, path_type=Path))
@click.option("--git", "repo_url", help="Clone this repository instead of reading PATH")
@click.option("--branch", default=SearchIndexImporter.DEFAULT_BRANCH, show_default=True, help="Branch to clone")
@click.option("--rebuild", is_flag=True, help="Clear all stored builds first")
@db_option
def import_(path: Path | None, repo_url: str | None, branch: str, rebuild: bool, db_path: Path) -> None:
    """Import search index files from PATH or a git repository."""
    if (path is None) == (repo_url is None):
        raise click.UsageError("Pass either PATH or --git URL.")

    importer = SearchIndexImporter(SearchIndexDatabase(db_path))
    try:
        if repo_url is not None:
            count = importer.rebuild_index(repo_url, branch) if rebuild else importer.index_from_git(repo_url, branch)
        else:
            if rebuild:
                importer.database.clear()
            count = importer.index_from_path(path)  # type: ignore[arg-type]
    except Exception as e:
        logger.error("Import failed: %s", e, exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Imported {count} builds into {db_path}")


@main.command()
@db_option
def builds(db_path: Path) -> None:
    """List stored builds."""
    database = SearchIndexDatabase(db_path)
    for build in database.list_builds():
        click.echo(f"{build.name}\t{build.entry_count}\t{build.imported_at}\t{build.source or '-'}")


@main.command()
@click.argument("build")
@db_option
def stats(build: str, db_path: Path) -> None:
    """Show page and category counts of BUILD."""
    database = SearchIndexDatabase(db_path)
    if database.get_build(build) is None:
        click.echo(f"Build not found: {build}", err=True)
        sys.exit(2)

    pages = database.list_pages(build)
    click.echo(f"pages: {len(pages)}")
    for category, total in database.category_counts(build).items():
        click.echo(f"{category}: {total}")


@main.command()
@click.argument("build")
@click.option("--page", help="Only entries of this page title")
@click.option("--category", help="Only entries of this category")
@click.option("--location", help="Only entries with this location")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Maximum number of entries")
@click.option("--json", "as_json", is_flag=True, help="Output entries as JSON")
@db_option
def show(
    build: str,
    page: str | None,
    category: str | None,
    location: str | None,
    limit: int | None,
    as_json: bool,
    db_path: Path,
) -> None:
    """List the entries of BUILD."""
    database = SearchIndexDatabase(db_path)
    if database.get_build(build) is None:
        click.echo(f"Build not found: {build}", err=True)
        sys.exit(2)

    entries = database.get_entries(build, location=location, page=page, category=category, limit=limit)
    if as_json:
        payload = [
            {
                "position": stored.position,
                **stored.entry.to_dict(),
                "signature": stored.signature,
                "summary": stored.summary,
            }
            for stored in entries
        ]
        click.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    for stored in entries:
        line = f"{stored.entry.category:<10} {stored.entry.title}"
        if stored.summary:
            line += f"  {stored.summary}"
        click.echo(line)


@main.command()
@click.argument("build")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@db_option
def export(build: str, output: Path, db_path: Path) -> None:
    """Write the stored index of BUILD to OUTPUT."""
    database = SearchIndexDatabase(db_path)
    index = database.get_index(build)
    if index is None:
        click.echo(f"Build not found: {build}", err=True)
        sys.exit(2)

    codec.dump(index, output)
    click.echo(f"Wrote {len(index)} entries to {output}")
