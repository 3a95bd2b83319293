"""
Theologos - Main CLI Application

Command-line interface for browsing a theological library: works,
outlines, catechism units with their proof texts, book pages, filtered
unit listings and the Bible chapters the proof texts come from.

The library is read from the database named by --database/DATABASE_URL,
or else from the JSON corpus named by --corpus/LIBRARY_CORPUS.
"""
import json
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from config import get_config
from core.errors import LibraryConfigError, LibraryError
from data.loaders import load_corpus, read_corpus
from db.interfaces import ILibraryRepository
from db.repository import SqlAlchemyLibraryRepository, import_corpus
from domain.entities import ProofTextGroup
from engine.library import LibraryReader
from engine.slugger import Slugger
from observability.logging import LoggingConfig, get_logger, setup_logging, shutdown_logging

# Initialize app
app = typer.Typer(
    name="theologos",
    help="Theologos - Theological Library Reader",
    add_completion=False
)

console = Console()

logger = get_logger("theologos.cli")


class OutputFormat(str, Enum):
    """Output format options."""
    TABLE = "table"
    JSON = "json"


CorpusOption = typer.Option(None, "--corpus", "-c", help="JSON corpus file (defaults to LIBRARY_CORPUS)")
DatabaseOption = typer.Option(None, "--database", "-d", help="Database URL (defaults to DATABASE_URL)")
TranslationOption = typer.Option(None, "--translation", "-t", help="Bible translation for proof texts")
OutputOption = typer.Option(OutputFormat.TABLE, "--output", "-o", help="Output format")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Verbose output")


@contextmanager
def _library_errors() -> Iterator[None]:
    """Render library errors in red and exit non-zero."""
    try:
        yield
    except LibraryError as e:
        logger.debug("Command failed", error_code=e.error_code, message=e.message)
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        for suggestion in e.suggestions:
            console.print(f"  - {escape(suggestion)}")
        raise typer.Exit(1)


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    shutdown_logging()
    setup_logging(LoggingConfig(level="DEBUG", json_format=get_config().logging.json_format))


def _repository(corpus: Optional[Path], database: Optional[str]) -> ILibraryRepository:
    config = get_config()
    database_url = database or config.database.url
    if database_url:
        return SqlAlchemyLibraryRepository.from_url(database_url, echo=config.database.echo)

    corpus_path = corpus or config.library.corpus_path
    if corpus_path is None:
        raise LibraryConfigError(
            "No library source: pass --corpus or --database, or set LIBRARY_CORPUS / DATABASE_URL",
            config_key="LIBRARY_CORPUS",
        )
    return load_corpus(corpus_path)


def _slugger() -> Slugger:
    overrides_path = get_config().library.slug_overrides_path
    return Slugger.from_file(overrides_path) if overrides_path else Slugger()


def _reader(
    corpus: Optional[Path],
    database: Optional[str],
    translation: Optional[str] = None,
) -> LibraryReader:
    config = get_config()
    return LibraryReader(
        _repository(corpus, database),
        slugger=_slugger(),
        translation=translation or config.library.translation,
        display_limit=config.library.display_limit,
    )


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _print_proof_texts(groups: Tuple[ProofTextGroup, ...]) -> None:
    if not groups:
        console.print("[dim]No proof texts[/dim]")
        return

    table = Table(title="Proof Texts")
    table.add_column("Reference", style="cyan", no_wrap=True)
    table.add_column("Text")
    for group in groups:
        text = " ".join(
            f"[bold]{ref.verse}[/bold] {escape(ref.text)}" if len(group.references) > 1 else escape(ref.text)
            for ref in group.references
        )
        table.add_row(group.display_text, text)
    console.print(table)


@app.command()
def works(
    corpus: Optional[Path] = CorpusOption,
    database: Optional[str] = DatabaseOption,
    output: OutputFormat = OutputOption,
    verbose: bool = VerboseOption,
):
    """List every work in the library with its slug."""
    _configure_logging(verbose)
    with _library_errors():
        summaries = _reader(corpus, database).list_works()

    if output == OutputFormat.JSON:
        _echo_json([summary.to_dict() for summary in summaries])
        return

    table = Table(title="Library")
    table.add_column("Slug", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Type", style="magenta")
    table.add_column("Units", justify="right")
    table.add_column("Reviewed", justify="right", style="green")

    for summary in summaries:
        table.add_row(
            summary.slug,
            escape(summary.title),
            summary.type,
            str(summary.unit_count),
            str(summary.reviewed_count),
        )

    console.print(table)
    console.print(f"\n{len(summaries)} works")


@app.command()
def outline(
    slug: str = typer.Argument(..., help="Work slug (e.g., wsc)"),
    corpus: Optional[Path] = CorpusOption,
    database: Optional[str] = DatabaseOption,
    output: OutputFormat = OutputOption,
    verbose: bool = VerboseOption,
):
    """Show a work's outline: one line per top-level unit."""
    _configure_logging(verbose)
    with _library_errors():
        result = _reader(corpus, database).get_outline(slug)

    if output == OutputFormat.JSON:
        _echo_json(result.to_dict())
        return

    byline = f" - {result.author}" if result.author else ""
    console.print(Panel.fit(f"[bold blue]{escape(result.title)}[/bold blue]{escape(byline)}", border_style="blue"))

    table = Table()
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Unit")
    table.add_column("Refs", justify="center")
    table.add_column("Page", justify="right")

    for unit in result.units:
        table.add_row(
            str(unit.number),
            escape(unit.display_text),
            "✓" if unit.has_references else "",
            str(unit.first_page) if unit.first_page is not None else "",
        )

    console.print(table)
    console.print(f"\n{result.total_units} units, {result.total_pages} addressable")


@app.command()
def unit(
    slug: str = typer.Argument(..., help="Work slug (e.g., wsc)"),
    number: str = typer.Argument(..., help="Unit number within the work"),
    corpus: Optional[Path] = CorpusOption,
    database: Optional[str] = DatabaseOption,
    translation: Optional[str] = TranslationOption,
    output: OutputFormat = OutputOption,
    verbose: bool = VerboseOption,
):
    """Show a unit's question and answer with grouped proof texts."""
    _configure_logging(verbose)
    with _library_errors():
        result = _reader(corpus, database, translation).get_unit(slug, number)

    if output == OutputFormat.JSON:
        _echo_json(result.to_dict())
        return

    console.print(f"[bold]{escape(result.work_title)}[/bold] {result.number}")
    if result.secondary_text:
        console.print(f"[bold cyan]Q.[/bold cyan] {escape(result.primary_text)}")
        console.print(f"[bold green]A.[/bold green] {escape(result.secondary_text)}")
    else:
        console.print(result.primary_text, markup=False)
    console.print()
    _print_proof_texts(result.proof_texts)


@app.command()
def page(
    slug: str = typer.Argument(..., help="Work slug (e.g., calvins-institutes)"),
    number: str = typer.Argument(..., help="Page number within the work"),
    corpus: Optional[Path] = CorpusOption,
    database: Optional[str] = DatabaseOption,
    translation: Optional[str] = TranslationOption,
    output: OutputFormat = OutputOption,
    verbose: bool = VerboseOption,
):
    """Show a page of a book with its chapter heading."""
    _configure_logging(verbose)
    with _library_errors():
        result = _reader(corpus, database, translation).get_page(slug, number)

    if output == OutputFormat.JSON:
        _echo_json(result.to_dict())
        return

    heading = f"{result.work_title} - page {result.page_number}"
    if result.chapter_number is not None:
        heading += f" (chapter {result.chapter_number}"
        heading += f": {result.chapter_title})" if result.chapter_title else ")"
    console.print(f"[bold]{escape(heading)}[/bold]\n")
    console.print(result.content, markup=False)
    console.print()
    _print_proof_texts(result.proof_texts)


@app.command()
def nav(
    unit_id: str = typer.Argument(..., help="Unit identifier"),
    corpus: Optional[Path] = CorpusOption,
    database: Optional[str] = DatabaseOption,
    output: OutputFormat = OutputOption,
):
    """Show previous/next units of the same type."""
    with _library_errors():
        result = _reader(corpus, database).get_navigation(unit_id)

    if output == OutputFormat.JSON:
        _echo_json(result.to_dict())
        return

    console.print(f"{result.position} of {result.total}")
    console.print(f"Previous: {result.prev_id or '-'}")
    console.print(f"Next: {result.next_id or '-'}")


@app.command()
def units(
    slug: str = typer.Argument(..., help="Work slug (e.g., wsc)"),
    status: Optional[str] = typer.Option(None, "--status", "-s", help="Review status: AUTO, EDITED or REVIEWED"),
    unit_type: Optional[str] = typer.Option(
        None, "--type", help="Unit type (default: paragraph for books, question otherwise)"
    ),
    limit: int = typer.Option(50, "--limit", "-l", help="Units per page (1-200)"),
    offset: int = typer.Option(0, "--offset", help="Units to skip"),
    corpus: Optional[Path] = CorpusOption,
    database: Optional[str] = DatabaseOption,
    output: OutputFormat = OutputOption,
    verbose: bool = VerboseOption,
):
    """List a work's units filtered by review status and type."""
    _configure_logging(verbose)
    with _library_errors():
        result = _reader(corpus, database).list_units(
            slug, status=status, unit_type=unit_type, limit=limit, offset=offset,
        )

    if output == OutputFormat.JSON:
        _echo_json(result.to_dict())
        return

    table = Table(title=f"{slug} ({result.unit_type})")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Id", style="dim")
    table.add_column("Title")
    table.add_column("Status", style="green")

    for item in result.units:
        table.add_row(str(item.position_index), escape(item.id), escape(item.title or ""), item.status)

    console.print(table)
    shown = f"{result.offset + 1}-{result.offset + len(result.units)}" if result.units else "0"
    console.print(f"\n{shown} of {result.total}" + (" (more)" if result.has_more else ""))


@app.command()
def books(
    corpus: Optional[Path] = CorpusOption,
    database: Optional[str] = DatabaseOption,
    output: OutputFormat = OutputOption,
    verbose: bool = VerboseOption,
):
    """List the books of the canon in canonical order."""
    _configure_logging(verbose)
    with _library_errors():
        summaries = _reader(corpus, database).list_books()

    if output == OutputFormat.JSON:
        _echo_json({
            "books": [summary.to_dict() for summary in summaries],
            "totalBooks": len(summaries),
        })
        return

    table = Table(title="Books")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Book")
    table.add_column("Abbr.", style="dim")
    table.add_column("Testament", style="magenta")
    table.add_column("Chapters", justify="right")

    for summary in summaries:
        table.add_row(
            str(summary.canonical_order or ""),
            escape(summary.name),
            escape(summary.abbreviation or ""),
            summary.testament or "",
            str(summary.chapter_count),
        )

    console.print(table)
    console.print(f"\n{len(summaries)} books")


@app.command()
def chapter(
    translation: str = typer.Argument(..., help="Translation abbreviation (e.g., WEB)"),
    book: str = typer.Argument(..., help="Book name, any case (e.g., romans)"),
    number: str = typer.Argument(..., help="Chapter number"),
    corpus: Optional[Path] = CorpusOption,
    database: Optional[str] = DatabaseOption,
    output: OutputFormat = OutputOption,
    verbose: bool = VerboseOption,
):
    """Read a chapter of the Bible in one translation."""
    _configure_logging(verbose)
    with _library_errors():
        result = _reader(corpus, database).get_chapter(translation, book, number)

    if output == OutputFormat.JSON:
        _echo_json(result.to_dict())
        return

    console.print(f"[bold]{escape(result.book)} {result.chapter_number}[/bold] [dim]({result.translation})[/dim]\n")
    for verse in result.verses:
        console.print(f"[cyan]{verse.number}[/cyan] {escape(verse.text)}")
    console.print(f"\n{len(result.verses)} verses")


@app.command()
def slug(
    title: str = typer.Argument(..., help="Work title"),
):
    """Print the slug a title is addressed by."""
    with _library_errors():
        slugger = _slugger()
    typer.echo(slugger.slug_for_title(title))


@app.command("import")
def import_file(
    corpus: Path = typer.Argument(..., help="JSON corpus file"),
    database: Optional[str] = DatabaseOption,
):
    """Load a JSON corpus into the database."""
    config = get_config()
    database_url = database or config.database.url
    if not database_url:
        console.print("[red]Error: No database: pass --database or set DATABASE_URL[/red]")
        raise typer.Exit(1)

    with _library_errors():
        loaded = read_corpus(corpus)
        import_corpus(
            database_url,
            echo=config.database.echo,
            works=loaded.works,
            units=loaded.units,
            references=loaded.references,
            books=loaded.books,
            chapters=loaded.chapters,
            verses=loaded.verses,
        )

    stats = loaded.stats()
    console.print(
        f"[green]Imported {stats['works']} works, {stats['units']} units "
        f"and {stats['verses']} verses[/green]"
    )


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
