"""Variable context exposed to name, content and condition templates."""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .models import ProjectData, Question, TemplateDescriptor

logger = logging.getLogger(__name__)

_PROJECT_NAME_PATTERN = re.compile(r"[^a-zA-Z0-9-]+")

RESERVED_KEYS = frozenset({"project", "date", "year", "vars", "answers"})


def normalize_project_name(name: str) -> str:
    """Strip every character that is not alphanumeric or a dash."""
    return _PROJECT_NAME_PATTERN.sub("", name)


class VariableContext(BaseModel):
    """Values available to templates; frozen once the run starts rendering."""

    model_config = ConfigDict(frozen=True)

    project: ProjectData
    timestamp: str
    year: int
    variables: dict[str, Any] = Field(default_factory=dict)
    answers: dict[str, Any] = Field(default_factory=dict)
    questions: dict[str, Question] = Field(default_factory=dict)

    def answer(self, key: str) -> Any:
        if key not in self.answers:
            raise KeyError(f"no survey answer named {key!r}")
        return self.answers[key]

    def question(self, key: str) -> Question:
        if key not in self.questions:
            raise KeyError(f"no survey question named {key!r}")
        return self.questions[key]

    def to_template_context(self) -> dict[str, Any]:
        """Build the mapping handed to Jinja2.

        Answers with identifier-like keys are also exposed at top level so
        that ``{ Name }`` works in names; reserved keys always win.
        """
        context: dict[str, Any] = {
            key: value
            for key, value in self.answers.items()
            if key.isidentifier() and key not in RESERVED_KEYS
        }
        context.update(
            project=self.project,
            date=self.timestamp,
            year=self.year,
            vars=dict(self.variables),
            answers=dict(self.answers),
        )
        return context

    def env_answers(self, prefix: str) -> dict[str, str]:
        """Survey answers as environment variables (``PREFIX_NAME=value``)."""
        env: dict[str, str] = {}
        for name, value in self.answers.items():
            key = f"{prefix.upper()}_{name.upper()}"
            if isinstance(value, bool):
                env[key] = "true" if value else "false"
            elif isinstance(value, (list, tuple)):
                env[key] = ",".join(str(item) for item in value)
            elif value is not None:
                env[key] = str(value)
        return env


def merge_variables(
    static: Mapping[str, Any], declared: Mapping[str, Any]
) -> dict[str, Any]:
    """Merge static configuration variables with template-declared ones.

    Template-declared values take precedence.
    """
    merged = dict(static)
    overridden = sorted(set(static) & set(declared))
    if overridden:
        logger.debug(f"Template overrides configured variable(s): {overridden}")
    merged.update(declared)
    return merged


def build_context(
    project: ProjectData,
    *,
    static_variables: Mapping[str, Any] | None = None,
    descriptor: TemplateDescriptor | None = None,
    answers: Mapping[str, Any] | None = None,
    overrides: Mapping[str, Any] | None = None,
    now: dt.datetime | None = None,
) -> VariableContext:
    """Build the variable context after the survey has completed.

    Args:
        project: Command data of the run
        static_variables: Variables from the static configuration
        descriptor: Template descriptor, if the template ships one
        answers: Survey answers keyed by question name
        overrides: Per-run variables, applied last
        now: Point in time captured for ``date`` and ``year``

    Returns:
        Context with raw (not yet self-rendered) variables
    """
    now = now or dt.datetime.now().astimezone()
    declared = descriptor.variables if descriptor else {}
    questions = {q.name: q for q in descriptor.questions} if descriptor else {}

    return VariableContext(
        project=project,
        timestamp=now.isoformat(timespec="seconds"),
        year=now.year,
        variables={**merge_variables(static_variables or {}, declared), **(overrides or {})},
        answers=dict(answers or {}),
        questions=questions,
    )
