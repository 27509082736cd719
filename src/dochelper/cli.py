"""CLI interface for dochelper.

Typer-based command-line interface with Rich output formatting.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from dochelper import __version__
from dochelper.chunk import WindowChunker
from dochelper.exceptions import DocHelperError
from dochelper.pipeline import Pipeline
from dochelper.project import ProjectManager
from dochelper.prompts import PromptEngine
from dochelper.registry import default_registry
from dochelper.session import Session, parse_pr_url
from dochelper.shell import (
    InteractiveShell,
    index_repository,
    print_answer,
    print_review,
    print_stats,
)
from dochelper.source import GitHubSource, changeset_from_diff
from dochelper.store import ChromaStore

if TYPE_CHECKING:
    from dochelper.config import DocHelperConfig

__all__ = ["app"]

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="dochelper",
    help="Documentation helper: ask questions about a repository's docs and review its PRs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Documentation helper for GitHub repositories."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=verbose)],
        force=True,
    )


def _require_project() -> ProjectManager:
    pm = ProjectManager(ProjectManager.find_project_root())
    if not pm.is_initialized:
        console.print(
            "[yellow]No dochelper project found.[/yellow] Run [bold]dochelper init[/bold] first."
        )
        raise typer.Exit(code=1)
    return pm


def _fail(message: str, error: Exception) -> typer.Exit:
    console.print(f"[red]{message}:[/red] {error}")
    logger.debug("%s", message, exc_info=True)
    return typer.Exit(code=1)


def _build_pipeline(pm: ProjectManager, config: DocHelperConfig) -> Pipeline:
    """Wire the configured providers into a pipeline."""
    try:
        return Pipeline(
            chunker=WindowChunker.from_config(config),
            embedder=default_registry.create("embedding", config.embedding.provider, config),
            store=ChromaStore(
                persist_path=pm.index_path,
                collection_name=config.store.collection_name,
            ),
            chat_model=default_registry.create("llm", config.llm.provider, config),
            config=config,
            prompts=PromptEngine(pm.root),
        )
    except DocHelperError as e:
        raise _fail("Failed to initialize pipeline", e) from e


@app.command()
def version() -> None:
    """Show dochelper version."""
    console.print(f"dochelper {__version__}")


@app.command()
def init(
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Project name"),
    ] = "",
    llm: Annotated[
        str,
        typer.Option("--llm", help="Chat provider (ollama, openai, yandex)"),
    ] = "",
    embedding: Annotated[
        str,
        typer.Option("--embedding", help="Embedding provider (ollama, openai, chromadb)"),
    ] = "",
) -> None:
    """Initialize a new dochelper project in the current directory."""
    pm = ProjectManager()
    try:
        project_dir = pm.init(name=name, llm_provider=llm, embedding_provider=embedding)
    except DocHelperError as e:
        raise _fail("Failed to initialize project", e) from e

    console.print(f"[green]Initialized dochelper project[/green] at {project_dir}")
    console.print("\nCreated:")
    console.print(f"  {pm.config_path}")
    console.print(f"  {pm.manifest_path}")

    console.print("\nNext steps:")
    console.print("  dochelper index <repo-url>   Index a repository's documentation")
    console.print("  dochelper chat               Start an interactive session")


@app.command()
def index(
    repo_url: Annotated[str, typer.Argument(help="GitHub repository URL")],
    branch: Annotated[
        str,
        typer.Option("--branch", "-b", help="Branch to read (default from config)"),
    ] = "",
) -> None:
    """Fetch a repository's documentation and rebuild the index."""
    pm = _require_project()
    try:
        config = pm.load_config()
        session = Session()
        session.set_repository(repo_url, branch or config.github.default_branch)
    except DocHelperError as e:
        raise _fail("Invalid repository", e) from e

    pipeline = _build_pipeline(pm, config)
    try:
        report = index_repository(session, GitHubSource(config), pipeline, console, pm)
    except DocHelperError as e:
        raise _fail("Indexing failed", e) from e

    if report is None:
        raise typer.Exit(code=1)


@app.command()
def ask(
    question: Annotated[str, typer.Argument(help="Question about the indexed docs")],
) -> None:
    """Answer one question from the indexed documentation."""
    pm = _require_project()
    try:
        config = pm.load_config()
        manifest = pm.load_manifest()
    except DocHelperError as e:
        raise _fail("Failed to load project", e) from e

    if not manifest.is_indexed:
        console.print(
            "[yellow]Nothing indexed yet.[/yellow] "
            "Run [bold]dochelper index <repo-url>[/bold] first."
        )
        raise typer.Exit(code=1)

    pipeline = _build_pipeline(pm, config)
    try:
        with console.status("Thinking..."):
            answer = pipeline.answer_question(question)
    except DocHelperError as e:
        raise _fail("Failed to answer", e) from e
    print_answer(console, answer)


@app.command()
def review(
    pr_url: Annotated[
        str,
        typer.Argument(help="GitHub pull request URL"),
    ] = "",
    diff: Annotated[
        Path | None,
        typer.Option("--diff", "-d", help="Review a local git diff file instead"),
    ] = None,
    title: Annotated[
        str,
        typer.Option("--title", "-t", help="Title for a local diff"),
    ] = "Local changes",
) -> None:
    """Review a pull request (or a local diff) against the indexed docs."""
    if not pr_url and diff is None:
        console.print("[yellow]Give a pull request URL or --diff FILE.[/yellow]")
        raise typer.Exit(code=1)

    pm = _require_project()
    try:
        config = pm.load_config()
        if diff is not None:
            changeset = changeset_from_diff(diff.read_text(encoding="utf-8"), title=title)
        else:
            owner, repo, number = parse_pr_url(pr_url)
            changeset = GitHubSource(config).fetch_changeset(owner, repo, number)
    except OSError as e:
        raise _fail("Cannot read diff", e) from e
    except DocHelperError as e:
        raise _fail("Failed to load changeset", e) from e

    if not changeset.files:
        console.print("[yellow]The changeset has no changed files.[/yellow]")
        raise typer.Exit(code=1)

    pipeline = _build_pipeline(pm, config)
    try:
        with console.status("Reviewing..."):
            result = pipeline.review_changeset(changeset)
    except DocHelperError as e:
        raise _fail("Review failed", e) from e
    print_review(console, result)


@app.command()
def status() -> None:
    """Show what is indexed and which providers the project is configured for."""
    pm = _require_project()
    try:
        st = pm.status()
        templates = PromptEngine(pm.root).list_templates()
    except DocHelperError as e:
        raise _fail("Failed to load project", e) from e

    console.print(f"[bold]dochelper project:[/bold] {st.root.name}")
    if st.repository:
        console.print(f"  Repository: {st.repository}@{st.branch}")

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("metric", style="dim")
    table.add_column("value", style="bold")
    table.add_row("Documents", str(st.document_count))
    table.add_row("Chunks", str(st.chunk_count))
    if st.config is not None:
        for label, category, section in (
            ("Embedding", "embedding", st.config.embedding),
            ("Chat model", "llm", st.config.llm),
        ):
            value = f"{section.provider} / {section.model}"
            if not default_registry.has_provider(category, section.provider):
                available = ", ".join(default_registry.list_providers(category))
                value += f" [red](unknown provider; available: {available})[/red]"
            table.add_row(label, value)
    table.add_row("Templates", ", ".join(templates))
    console.print(table)

    if st.document_count == 0:
        console.print(
            "\n[dim]No documents indexed yet. "
            "Run [bold]dochelper index <repo-url>[/bold] to start.[/dim]"
        )


@app.command()
def stats() -> None:
    """Show index statistics."""
    pm = _require_project()
    try:
        config = pm.load_config()
        manifest = pm.load_manifest()
        index_stats = ChromaStore(
            persist_path=pm.index_path,
            collection_name=config.store.collection_name,
        ).stats()
    except DocHelperError as e:
        raise _fail("Failed to read index", e) from e

    if manifest.repository:
        console.print(f"[bold]Repository:[/bold] {manifest.repository}@{manifest.branch}")
        console.print(f"[dim]Indexed at {manifest.indexed_at}[/dim]")
    print_stats(console, index_stats)


@app.command()
def chat() -> None:
    """Start an interactive session."""
    pm = _require_project()
    try:
        config = pm.load_config()
        manifest = pm.load_manifest()
    except DocHelperError as e:
        raise _fail("Failed to load project", e) from e

    session = Session(branch=config.github.default_branch)
    if manifest.is_indexed:
        try:
            session.set_repository(manifest.repository, manifest.branch)
            session.is_indexed = True
        except DocHelperError:
            logger.warning("Ignoring unparseable indexed repository %r", manifest.repository)

    shell = InteractiveShell(
        session=session,
        pipeline=_build_pipeline(pm, config),
        source=GitHubSource(config),
        console=console,
        manager=pm,
    )
    shell.run()
