"""Jinja2 prompt templates for dochelper.

Loads templates from built-in and user-override directories, renders them
with typed prompt-context dataclasses. User overrides in
.dochelper/templates/ take precedence over built-in templates in
src/dochelper/templates/.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from importlib.resources import files
from pathlib import Path
from typing import TYPE_CHECKING

import jinja2

from dochelper.exceptions import PromptError
from dochelper.project import PROJECT_DIR, TEMPLATES_DIR
from dochelper.types import ChatMessage

if TYPE_CHECKING:
    from dochelper.types import PullRequest

__all__ = [
    "QA_SYSTEM_TEMPLATE",
    "QA_USER_TEMPLATE",
    "REVIEW_SYSTEM_TEMPLATE",
    "REVIEW_USER_TEMPLATE",
    "PromptEngine",
    "QuestionPrompt",
    "ReviewPrompt",
]

logger = logging.getLogger(__name__)

QA_SYSTEM_TEMPLATE = "qa_system.md.j2"
QA_USER_TEMPLATE = "qa_user.md.j2"
REVIEW_SYSTEM_TEMPLATE = "review_system.md.j2"
REVIEW_USER_TEMPLATE = "review_user.md.j2"


@dataclass(frozen=True)
class QuestionPrompt:
    """Data available to the question-answering templates."""

    question: str
    context: str
    history: tuple[ChatMessage, ...] = ()


@dataclass(frozen=True)
class ReviewPrompt:
    """Data available to the review templates."""

    context: str
    diff_summary: str
    number: int = 0
    title: str = ""
    author: str = ""
    head_branch: str = ""
    base_branch: str = ""
    description: str = ""

    @classmethod
    def build(cls, pull_request: PullRequest, context: str, diff_summary: str) -> ReviewPrompt:
        return cls(
            context=context,
            diff_summary=diff_summary,
            number=pull_request.number,
            title=pull_request.title,
            author=pull_request.author,
            head_branch=pull_request.head_branch,
            base_branch=pull_request.base_branch,
            description=pull_request.description,
        )


class PromptEngine:
    """Jinja2 template engine with built-in and user-override support.

    Template search order:
      1. .dochelper/templates/ (user overrides, optional)
      2. src/dochelper/templates/ (built-in, always present)

    Args:
        project_root: Project root directory. If provided, enables user
            template overrides from ``project_root/.dochelper/templates/``.
    """

    def __init__(self, project_root: Path | None = None) -> None:
        search_paths: list[str] = []

        if project_root is not None:
            user_dir = project_root / PROJECT_DIR / TEMPLATES_DIR
            if user_dir.is_dir():
                search_paths.append(str(user_dir))
                logger.info("User template overrides enabled: %s", user_dir)

        builtin_dir = Path(str(files("dochelper") / "templates"))
        if not builtin_dir.is_dir():
            logger.debug("Expected template dir at: %s", builtin_dir)
            raise PromptError(
                "Built-in template directory not found — installation may be corrupted"
            )
        search_paths.append(str(builtin_dir))

        self._loader = jinja2.FileSystemLoader(search_paths)
        self._env = jinja2.Environment(
            loader=self._loader,
            autoescape=False,
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template_name: str, context: QuestionPrompt | ReviewPrompt) -> str:
        """Render a template with a prompt context.

        Context is flattened via ``dataclasses.asdict()`` before passing
        to Jinja2. Nested dataclasses become dicts; tuples become lists.

        Raises:
            PromptError: If the template is not found or rendering fails.
        """
        try:
            template = self._env.get_template(template_name)
        except jinja2.TemplateNotFound as e:
            raise PromptError(f"Template not found: {template_name}") from e

        try:
            return template.render(**asdict(context)).strip()
        except jinja2.TemplateError as e:
            raise PromptError(f"Failed to render template {template_name}: {e}") from e

    def question_messages(self, prompt: QuestionPrompt) -> list[ChatMessage]:
        """System instruction plus one user message with context, history and question."""
        return [
            ChatMessage(role="system", text=self.render(QA_SYSTEM_TEMPLATE, prompt)),
            ChatMessage(role="user", text=self.render(QA_USER_TEMPLATE, prompt)),
        ]

    def review_messages(self, prompt: ReviewPrompt) -> list[ChatMessage]:
        return [
            ChatMessage(role="system", text=self.render(REVIEW_SYSTEM_TEMPLATE, prompt)),
            ChatMessage(role="user", text=self.render(REVIEW_USER_TEMPLATE, prompt)),
        ]

    def list_templates(self) -> list[str]:
        """List all available template names (built-in + overrides)."""
        return sorted(self._loader.list_templates())
