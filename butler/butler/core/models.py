"""Domain models for templates, surveys and materialization jobs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

QuestionKind = Literal["input", "password", "confirm", "select", "multiselect"]
Phase = Literal["rename", "read", "render", "write", "delete", "hook", "job"]


class ProjectData(BaseModel):
    """Command data collected before the template survey."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Normalized project name")
    path: Path = Field(..., description="Destination directory")
    template: str = Field(..., description="Template name from the catalogue")
    description: str = Field(default="", description="Free-form description")


class Question(BaseModel):
    """A single survey question declared by a template."""

    type: QuestionKind
    name: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    help: str = ""
    default: Any = None
    options: list[str] = Field(default_factory=list)
    required: bool = False

    @model_validator(mode="after")
    def _check_kind(self) -> Question:
        if self.type in ("select", "multiselect") and not self.options:
            raise ValueError(f"question {self.name!r}: options are required")
        if self.default is None:
            return self
        if self.type in ("input", "select") and not isinstance(self.default, str):
            raise ValueError(
                f"question {self.name!r}: default must be a string on {self.type} questions"
            )
        if self.type == "confirm" and not isinstance(self.default, bool):
            raise ValueError(
                f"question {self.name!r}: default must be a boolean on confirm questions"
            )
        if self.type == "multiselect" and not (
            isinstance(self.default, list)
            and all(isinstance(item, str) for item in self.default)
        ):
            raise ValueError(
                f"question {self.name!r}: default must be a list of strings on multiselect questions"
            )
        return self


class Hook(BaseModel):
    """An external command run after the project was committed."""

    name: str = Field(..., min_length=1)
    cmd: str = Field(..., min_length=1)
    args: list[str] = Field(default_factory=list)
    relative: bool = Field(
        default=False, description="Resolve cmd relative to the project root"
    )
    verbose: bool = False
    enabled: str = Field(default="", description="Condition expression")
    required: bool = False


class TemplateDescriptor(BaseModel):
    """The survey file shipped at the root of a template."""

    model_config = ConfigDict(populate_by_name=True)

    questions: list[Question] = Field(default_factory=list)
    after_hooks: list[Hook] = Field(default_factory=list, alias="afterHooks")
    variables: dict[str, Any] = Field(default_factory=dict)
    butler_version: str = Field(default="", alias="butlerVersion")
    deprecated: bool = False

    @field_validator("questions")
    @classmethod
    def _unique_names(cls, questions: list[Question]) -> list[Question]:
        seen: set[str] = set()
        for question in questions:
            if question.name in seen:
                raise ValueError(f"duplicate question name {question.name!r}")
            seen.add(question.name)
        return questions

    @field_validator("variables", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    def question(self, name: str) -> Question | None:
        for question in self.questions:
            if question.name == name:
                return question
        return None


class TemplateSource(BaseModel):
    """A catalogue entry: template name and where to fetch it from."""

    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)


class ButlerConfig(BaseModel):
    """Static configuration loaded from ``butler.yml``."""

    templates: list[TemplateSource] = Field(default_factory=list)
    variables: dict[str, str] = Field(default_factory=dict)

    @field_validator("templates", "variables", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return [] if info.field_name == "templates" else {}
        return value

    def get_template(self, name: str) -> TemplateSource | None:
        for template in self.templates:
            if template.name == name:
                return template
        return None

    def template_names(self) -> list[str]:
        return sorted(template.name for template in self.templates)


@dataclass(frozen=True)
class MaterializationJob:
    """One file to render, discovered after directory renames were applied."""

    source: Path
    base_name: str


@dataclass(frozen=True)
class ErrorRecord:
    """A non-fatal failure of a single job."""

    path: Path
    phase: Phase
    cause: str

    def __str__(self) -> str:
        return f"{self.phase} {self.path}: {self.cause}"
