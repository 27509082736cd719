"""Tests for dochelper.prompts — Jinja2 prompt templates."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from dochelper.exceptions import PromptError
from dochelper.project import PROJECT_DIR, TEMPLATES_DIR
from dochelper.prompts import (
    QA_USER_TEMPLATE,
    REVIEW_SYSTEM_TEMPLATE,
    PromptEngine,
    QuestionPrompt,
    ReviewPrompt,
)
from dochelper.types import ChatMessage, PullRequest

if TYPE_CHECKING:
    from pathlib import Path


class TestBuiltinTemplates:
    def test_lists_builtin_templates(self):
        names = PromptEngine().list_templates()
        expected = ("qa_system.md.j2", "qa_user.md.j2", "review_system.md.j2", "review_user.md.j2")
        assert set(expected) <= set(names)

    def test_question_messages(self):
        prompt = QuestionPrompt(
            question="How do I run the tests?",
            context="Document: README.md\nContent:\nRun pytest.",
        )
        messages = PromptEngine().question_messages(prompt)

        assert [m.role for m in messages] == ["system", "user"]
        user = messages[1].text
        assert "Run pytest." in user
        assert "How do I run the tests?" in user
        assert "Previous conversation" not in user

    def test_history_rendered_in_user_message(self):
        prompt = QuestionPrompt(
            question="And on Windows?",
            context="ctx",
            history=(
                ChatMessage(role="user", text="How do I install it?"),
                ChatMessage(role="assistant", text="Use pip install dochelper."),
            ),
        )
        user = PromptEngine().question_messages(prompt)[1].text
        assert "User: How do I install it?" in user
        assert "Assistant: Use pip install dochelper." in user
        assert user.index("Assistant:") < user.index("And on Windows?")

    def test_review_system_lists_markers(self):
        prompt = ReviewPrompt(context="", diff_summary="")
        text = PromptEngine().render(REVIEW_SYSTEM_TEMPLATE, prompt)
        for marker in ("🔴 [CRITICAL]", "🟡 [WARNING]", "🔵 [SUGGESTION]"):
            assert marker in text

    def test_review_user_message(self):
        pr = PullRequest(
            number=42,
            title="Add caching",
            description="",
            author="octocat",
            head_branch="feature/cache",
            base_branch="main",
        )
        prompt = ReviewPrompt.build(
            pr, context="[source] README.md\nUse Redis.", diff_summary="Files changed: 1"
        )
        user = PromptEngine().review_messages(prompt)[1].text

        assert "#42" in user
        assert "Add caching" in user
        assert "octocat" in user
        assert "feature/cache → main" in user
        assert "No description" in user
        assert "Use Redis." in user
        assert "Files changed: 1" in user


class TestUserOverrides:
    def test_override_takes_precedence(self, tmp_path: Path):
        override_dir = tmp_path / PROJECT_DIR / TEMPLATES_DIR
        override_dir.mkdir(parents=True)
        (override_dir / QA_USER_TEMPLATE).write_text("Q={{ question }}", encoding="utf-8")

        engine = PromptEngine(tmp_path)
        text = engine.render(QA_USER_TEMPLATE, QuestionPrompt(question="why?", context="c"))
        assert text == "Q=why?"

    def test_missing_override_dir_uses_builtin(self, tmp_path: Path):
        engine = PromptEngine(tmp_path)
        text = engine.render(QA_USER_TEMPLATE, QuestionPrompt(question="why?", context="c"))
        assert "why?" in text


class TestErrors:
    def test_unknown_template(self):
        with pytest.raises(PromptError, match="Template not found"):
            PromptEngine().render("nope.md.j2", QuestionPrompt(question="q", context="c"))

    def test_undefined_variable(self, tmp_path: Path):
        override_dir = tmp_path / PROJECT_DIR / TEMPLATES_DIR
        override_dir.mkdir(parents=True)
        (override_dir / "broken.md.j2").write_text("{{ missing_value }}", encoding="utf-8")

        engine = PromptEngine(tmp_path)
        with pytest.raises(PromptError, match="Failed to render"):
            engine.render("broken.md.j2", QuestionPrompt(question="q", context="c"))
