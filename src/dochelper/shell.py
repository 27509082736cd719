"""Interactive chat loop for dochelper.

Each slash command maps to one orchestrator operation; any other line is a
question about the indexed repository.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from dochelper.exceptions import DocHelperError
from dochelper.manifest import DocumentEntry
from dochelper.session import parse_pr_url
from dochelper.types import IssueSeverity

if TYPE_CHECKING:
    from rich.console import Console

    from dochelper.pipeline import Pipeline
    from dochelper.project import ProjectManager
    from dochelper.session import Session
    from dochelper.source.base import BaseSource
    from dochelper.types import Answer, IndexReport, IndexStats, ReviewResult

__all__ = [
    "DEFAULT_HELP_QUESTION",
    "InteractiveShell",
    "index_repository",
    "print_answer",
    "print_review",
    "print_stats",
]

logger = logging.getLogger(__name__)

DEFAULT_HELP_QUESTION = "Describe the structure of the project and its main components."

_COMMANDS: tuple[tuple[str, str], ...] = (
    ("/repo <url>", "Set the GitHub repository"),
    ("/branch [name]", "Show or change the branch"),
    ("/index", "Index the repository documentation"),
    ("/help [question]", "Ask about the project (default: its structure)"),
    ("/review <pr-url>", "Review a pull request against the docs"),
    ("/stats", "Show index statistics"),
    ("/clear", "Clear the conversation history"),
    ("/exit", "Quit"),
)

_SEVERITY_STYLE = {
    IssueSeverity.ERROR: "red",
    IssueSeverity.WARNING: "yellow",
    IssueSeverity.INFO: "blue",
}


def index_repository(
    session: Session,
    source: BaseSource,
    pipeline: Pipeline,
    console: Console,
    manager: ProjectManager | None = None,
) -> IndexReport | None:
    """Fetch the session repository's docs and rebuild the index.

    Returns None when the repository has no documentation to index or when
    no chunk could be stored. The session then stays unindexed.
    """
    owner, repo = session.owner, session.repo
    if owner is None or repo is None:
        console.print("[yellow]Set a repository first:[/yellow] /repo <url>")
        return None

    documents = source.read_documents(owner, repo, session.branch)
    if not documents:
        console.print(
            "[yellow]No documentation found.[/yellow] "
            "The repository needs a README or a docs/ directory."
        )
        return None

    console.print(f"Found [bold]{len(documents)}[/bold] documents:")
    for doc in documents:
        console.print(f"  {escape(doc.path)} [dim]({len(doc.content)} chars)[/dim]")

    with console.status("Indexing..."):
        report = pipeline.index_corpus(documents)

    stored = report.chunks_stored > 0
    session.is_indexed = stored
    if manager is not None:
        entries = [
            DocumentEntry(
                path=doc.path,
                chars=len(doc.content),
                chunks=report.stored_per_document.get(doc.path, 0),
            )
            for doc in documents
        ]
        manifest = manager.load_manifest()
        manifest.record_index(
            repository=session.repository_url or f"{owner}/{repo}",
            branch=session.branch,
            entries=entries if stored else [],
        )
        manager.save_manifest(manifest)

    if not stored:
        console.print(
            f"[red]No chunks were stored[/red] ({report.chunks_skipped} failed). "
            "Check the embedding service and run /index again."
        )
        return None

    console.print(
        f"[green]Indexed {report.chunks_stored} chunks[/green] "
        f"from {report.documents} documents"
    )
    if report.chunks_skipped:
        console.print(f"[yellow]Skipped {report.chunks_skipped} chunks[/yellow] (see log)")
    return report


def print_answer(console: Console, answer: Answer) -> None:
    console.print(Panel(Text(answer.answer), title="Answer", border_style="cyan"))
    if answer.sources:
        console.print("[bold]Sources:[/bold]")
        for i, result in enumerate(answer.sources, start=1):
            console.print(
                f"  {i}. {escape(result.chunk.source_label)} "
                f"[dim](relevance {result.similarity * 100:.1f}%)[/dim]"
            )
    console.print(f"[dim]Answered in {answer.latency_ms / 1000:.1f}s[/dim]")


def print_review(console: Console, result: ReviewResult) -> None:
    pr = result.pull_request
    title = f"#{pr.number} {pr.title}" if pr.number else pr.title
    console.print(
        Panel(Text(result.summary), title=escape(f"Review: {title}"), border_style="cyan")
    )

    if result.issues:
        table = Table(title="Issues")
        table.add_column("Severity")
        table.add_column("File")
        table.add_column("Description")
        for issue in result.issues:
            style = _SEVERITY_STYLE[issue.severity]
            table.add_row(
                Text(issue.severity.value, style=style), Text(issue.file), Text(issue.description)
            )
        console.print(table)
    else:
        console.print("[green]No issues flagged.[/green]")

    console.print(
        f"[dim]{len(result.context)} documentation chunks used, "
        f"reviewed in {result.latency_ms / 1000:.1f}s[/dim]"
    )


def print_stats(console: Console, stats: IndexStats) -> None:
    if stats.chunk_count == 0:
        console.print("[yellow]The index is empty.[/yellow] Index a repository first.")
        return

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("metric", style="dim")
    table.add_column("value", style="bold")
    table.add_row("Documents", str(stats.document_count))
    table.add_row("Chunks", str(stats.chunk_count))
    if stats.document_count:
        table.add_row("Chunks per document", str(stats.chunk_count // stats.document_count))
    console.print(table)


class InteractiveShell:
    """Read-eval loop over a :class:`Session`.

    Errors from a command are printed and the loop continues.
    """

    def __init__(
        self,
        session: Session,
        pipeline: Pipeline,
        source: BaseSource,
        console: Console,
        manager: ProjectManager | None = None,
    ) -> None:
        self.session = session
        self.pipeline = pipeline
        self.source = source
        self.console = console
        self.manager = manager

    def run(self) -> None:
        self.print_menu()
        while True:
            try:
                line = self.console.input("\n[bold cyan]>[/bold cyan] ")
            except (EOFError, KeyboardInterrupt):
                self.console.print("\nGoodbye!")
                return
            if not self.handle(line):
                return

    def handle(self, line: str) -> bool:
        """Process one input line. Returns False when the loop should stop."""
        line = line.strip()
        if not line:
            return True

        command, _, arg = line.partition(" ")
        arg = arg.strip()

        if command in ("/exit", "/quit"):
            self.console.print("Goodbye!")
            return False

        try:
            self._dispatch(command, arg, line)
        except DocHelperError as e:
            logger.debug("Command %r failed", line, exc_info=True)
            self.console.print(f"[red]Error:[/red] {escape(str(e))}")
        return True

    def _dispatch(self, command: str, arg: str, line: str) -> None:
        if command == "/repo":
            self._repo(arg)
        elif command == "/branch":
            self._branch(arg)
        elif command == "/index":
            index_repository(self.session, self.source, self.pipeline, self.console, self.manager)
        elif command == "/help":
            if self._require_index():
                self._ask(arg or DEFAULT_HELP_QUESTION)
        elif command == "/review":
            self._review(arg)
        elif command == "/stats":
            print_stats(self.console, self.pipeline.stats())
        elif command == "/clear":
            self.session.clear_history()
            self.console.print("[green]Conversation history cleared.[/green]")
        elif command.startswith("/"):
            self.console.print(f"[yellow]Unknown command:[/yellow] {command}")
            self.print_menu()
        elif self._require_index():
            self._ask(line)

    def print_menu(self) -> None:
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("command", style="bold")
        table.add_column("description", style="dim")
        for name, description in _COMMANDS:
            table.add_row(escape(name), description)
        self.console.print(table)

        if self.session.has_repository:
            state = "indexed" if self.session.is_indexed else "not indexed"
            self.console.print(
                f"Repository: {self.session.owner}/{self.session.repo}"
                f"@{self.session.branch} ({state})"
            )
        else:
            self.console.print("[yellow]No repository set.[/yellow] Use /repo <url>")

    def _require_index(self) -> bool:
        if not self.session.is_indexed:
            self.console.print(
                "[yellow]Set a repository (/repo) and index it (/index) first.[/yellow]"
            )
            return False
        return True

    def _repo(self, url: str) -> None:
        if not url:
            self.console.print("Usage: /repo <url>")
            return
        self.session.set_repository(url, self.pipeline.config.github.default_branch)
        self.console.print(
            f"[green]Repository set:[/green] {self.session.owner}/{self.session.repo}"
            f" (branch {self.session.branch})"
        )

    def _branch(self, name: str) -> None:
        if not self.session.has_repository:
            self.console.print("[yellow]Set a repository first:[/yellow] /repo <url>")
            return
        if name and name != self.session.branch:
            self.session.branch = name
            self.session.is_indexed = False
            self.console.print(f"Branch set to [bold]{name}[/bold]. Run /index to re-index.")
        else:
            self.console.print(f"Current branch: [bold]{self.session.branch}[/bold]")

    def _ask(self, question: str) -> None:
        with self.console.status("Thinking..."):
            answer = self.pipeline.answer_question(question, self.session.history)
        print_answer(self.console, answer)
        self.session.add_exchange(question, answer.answer)

    def _review(self, url: str) -> None:
        if not url:
            self.console.print("Usage: /review <pr-url>")
            return
        owner, repo, number = parse_pr_url(url)
        changeset = self.source.fetch_changeset(owner, repo, number)
        with self.console.status(f"Reviewing {owner}/{repo}#{number}..."):
            result = self.pipeline.review_changeset(changeset)
        print_review(self.console, result)
