"""Survey and confirmation collaborators."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence

import click
import typer
import yaml

from ..core.errors import DescriptorError, SetupError
from ..core.models import Question

logger = logging.getLogger(__name__)

_TRUE = {"true", "1", "yes", "y", "on"}
_FALSE = {"false", "0", "no", "n", "off"}


class Survey(Protocol):
    def ask(self, questions: Sequence[Question]) -> dict[str, Any]: ...


class Confirm(Protocol):
    def __call__(self, message: str) -> bool: ...


def _split_choices(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def coerce_answer(question: Question, value: Any) -> Any:
    """Convert a raw answer to the type of its question and validate it.

    Raises:
        ValueError: when the answer does not fit the question
    """
    if question.type == "confirm":
        if isinstance(value, bool):
            return value
        lowered = str(value).strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"{value!r} is not a yes/no answer")

    if question.type == "multiselect":
        items = _split_choices(value) if isinstance(value, str) else [str(v) for v in value]
        unknown = [item for item in items if item not in question.options]
        if unknown:
            raise ValueError(f"unknown option(s) {unknown}, expected {question.options}")
        if question.required and not items:
            raise ValueError("at least one option is required")
        return items

    text = "" if value is None else str(value)
    if question.type == "select" and text not in question.options:
        raise ValueError(f"{text!r} is not one of {question.options}")
    if question.required and not text.strip():
        raise ValueError("a value is required")
    return text


def _default_for(question: Question) -> Any:
    if question.default is not None:
        return question.default
    if question.type == "confirm":
        return False
    if question.type == "select":
        return question.options[0]
    if question.type == "multiselect":
        return []
    return None


class AnswersSurvey:
    """Answers the survey from a mapping, falling back to question defaults."""

    def __init__(self, answers: Mapping[str, Any]) -> None:
        self.answers = dict(answers)

    @classmethod
    def from_file(cls, path: Path) -> AnswersSurvey:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise DescriptorError(f"answers file {path} could not be read: {e}") from e
        if not isinstance(data, dict):
            raise DescriptorError(f"answers file {path} must contain a mapping")
        return cls(data)

    def ask(self, questions: Sequence[Question]) -> dict[str, Any]:
        results: dict[str, Any] = {}
        for question in questions:
            raw = self.answers.get(question.name, _default_for(question))
            if raw is None and question.required:
                raise SetupError(f"missing answer for required question {question.name!r}")
            try:
                results[question.name] = coerce_answer(question, raw)
            except ValueError as e:
                raise SetupError(f"invalid answer for {question.name!r}: {e}") from e

        unused = sorted(set(self.answers) - {q.name for q in questions})
        if unused:
            logger.warning(f"Ignoring answers without a question: {unused}")
        return results


class PromptSurvey:
    """Asks every question on the terminal."""

    def ask(self, questions: Sequence[Question]) -> dict[str, Any]:
        return {question.name: self.ask_one(question) for question in questions}

    def ask_one(self, question: Question) -> Any:
        if question.help:
            typer.secho(question.help, dim=True)

        while True:
            raw = self._prompt(question)
            try:
                return coerce_answer(question, raw)
            except ValueError as e:
                typer.secho(f"Invalid answer: {e}", fg=typer.colors.RED, err=True)

    def _prompt(self, question: Question) -> Any:
        default = _default_for(question)

        if question.type == "confirm":
            return typer.confirm(question.message, default=bool(default))

        if question.type == "password":
            return typer.prompt(
                question.message,
                hide_input=True,
                default=None if question.required else "",
                show_default=False,
            )

        if question.type == "select":
            return typer.prompt(
                question.message,
                type=click.Choice(question.options),
                default=default,
            )

        if question.type == "multiselect":
            typer.echo(f"Options: {', '.join(question.options)}")
            return typer.prompt(
                f"{question.message} (comma-separated)",
                default=",".join(default),
                show_default=bool(default),
            )

        return typer.prompt(
            question.message,
            default=default if default is not None else (None if question.required else ""),
            show_default=default is not None,
        )


def prompt_confirm(message: str) -> bool:
    return typer.confirm(message, default=False)


def always_confirm(message: str) -> bool:
    logger.info(f"{message} yes")
    return True
