"""
Command-line interface for groundrag.

Commands:
    chunk    - Show how a document is split into chunks
    retrieve - Build a collection from a document and query it
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from groundrag.config import settings
from groundrag.exceptions import RateLimited, RetrievalError

app = typer.Typer(
    name="groundrag",
    help="Retrieve the passages of a document most relevant to a query",
    add_completion=False,
)
console = Console()


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@app.callback()
def main(
    log_level: Optional[LogLevel] = typer.Option(None, case_sensitive=False, help="Override LOG_LEVEL"),
) -> None:
    """Configure logging for all commands."""
    logging.basicConfig(
        level=log_level.value if log_level else settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _read_document(path: Path) -> str:
    if not path.is_file():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _preview(text: str, width: int = 80) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


@app.command()
def chunk(
    path: Path = typer.Argument(..., help="Text file to chunk"),
    chunk_size: int = typer.Option(settings.chunk_size, min=1, help="Maximum characters per chunk"),
) -> None:
    """Split a document into chunks and list them."""
    from groundrag.retrieval.chunker import chunk_text

    texts = chunk_text(_read_document(path), chunk_size)

    if not texts:
        console.print("[yellow]Document is empty.[/yellow]")
        return

    table = Table(title=f"{len(texts)} chunks")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Length", style="green", justify="right")
    table.add_column("Preview")

    for i, text in enumerate(texts):
        table.add_row(str(i), str(len(text)), escape(_preview(text)))

    console.print(table)


@app.command()
def retrieve(
    path: Path = typer.Argument(..., help="Text file to search"),
    query: str = typer.Argument(..., help="Query text"),
    top_k: Optional[int] = typer.Option(None, "--top-k", "-k", min=0, help="Chunks to return [default: RETRIEVAL_TOP_K]"),
    chunk_size: Optional[int] = typer.Option(None, min=1, help="Maximum characters per chunk [default: CHUNK_SIZE]"),
    batch_size: Optional[int] = typer.Option(None, min=1, help="Texts per embedding request [default: EMBEDDING_BATCH_SIZE]"),
    table: bool = typer.Option(False, "--table", "-t", help="Show results as a table"),
) -> None:
    """Retrieve the chunks of a document most relevant to a query."""
    from groundrag.retrieval.pipeline import RetrievalPipeline, format_context
    from groundrag.retrieval.resources import get_pipeline

    text = _read_document(path)
    pipeline = get_pipeline()

    overrides = {
        name: value
        for name, value in (("chunk_size", chunk_size), ("batch_size", batch_size), ("top_k", top_k))
        if value is not None
    }
    if overrides:
        pipeline = RetrievalPipeline(pipeline.embedder.provider, pipeline.config.model_copy(update=overrides))

    try:
        with console.status("[bold green]Embedding document..."):
            collection = pipeline.build_collection(text)
            results = pipeline.retrieve(query, collection)
    except RateLimited as e:
        console.print("[yellow]Embedding usage limit reached. Please try again later.[/yellow]")
        if e.retry_after is not None:
            console.print(f"[dim]Provider suggests retrying in {e.retry_after:.0f}s[/dim]")
        raise typer.Exit(2)
    except RetrievalError as e:
        console.print(f"[red]Retrieval failed: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not results:
        console.print("[yellow]No chunks retrieved.[/yellow]")
        return

    if table:
        result_table = Table(title=f"Top {len(results)} of {len(collection)} chunks")
        result_table.add_column("Rank", style="cyan", justify="right")
        result_table.add_column("Length", style="green", justify="right")
        result_table.add_column("Preview")
        for rank, result in enumerate(results, start=1):
            result_table.add_row(str(rank), str(len(result.text)), escape(_preview(result.text)))
        console.print(result_table)
    else:
        console.print(format_context(results), markup=False, highlight=False)


if __name__ == "__main__":
    app()
