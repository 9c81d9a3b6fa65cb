"""Shared fixtures: projects, evaluators and on-disk template trees."""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Any, Callable

import pytest

from butler.core.context import build_context
from butler.core.models import ButlerConfig, ProjectData, TemplateDescriptor, TemplateSource
from butler.core.settings import Settings
from butler.rendering import TemplateEvaluator

FIXED_NOW = dt.datetime(2024, 5, 17, 12, 0, 0, tzinfo=dt.timezone.utc)


def _write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        str(path.relative_to(root)): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def write_tree() -> Callable[[Path, dict[str, str | bytes]], Path]:
    return _write_tree


@pytest.fixture
def snapshot() -> Callable[[Path], dict[str, bytes]]:
    return _snapshot


@pytest.fixture
def project(tmp_path: Path) -> ProjectData:
    return ProjectData(
        name="demo",
        path=tmp_path / "out" / "demo",
        template="basic",
        description="A demo project",
    )


@pytest.fixture
def make_evaluator(project: ProjectData) -> Callable[..., TemplateEvaluator]:
    def factory(
        answers: dict[str, Any] | None = None,
        variables: dict[str, Any] | None = None,
        descriptor: TemplateDescriptor | None = None,
    ) -> TemplateEvaluator:
        context = build_context(
            project,
            static_variables=variables,
            descriptor=descriptor,
            answers=answers,
            now=FIXED_NOW,
        )
        return TemplateEvaluator.prepare(context)

    return factory


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A template exercising renames, removals, exclusions and a survey."""
    return _write_tree(
        tmp_path / "template",
        {
            "butler-survey.yml": (
                "questions:\n"
                "  - type: input\n"
                "    name: Name\n"
                "    message: What is the module name?\n"
                "    required: true\n"
                "  - type: confirm\n"
                "    name: with_docs\n"
                "    message: Add documentation?\n"
                "    default: false\n"
                "variables:\n"
                "  company: ACME\n"
                "  copyright: \"(c) butler{ year } butler{ vars.company }\"\n"
            ),
            "{ Name }/README.md": "Hello butler{ project.name }\n",
            "{% if false %}x{% endif %}/child.txt": "never\n",
            "{% if with_docs %}docs{% endif %}/index.md": "# Docs\n",
            "{% if false %}gone.txt{% endif %}": "gone\n",
            "LICENSE": "butler{ vars.copyright }\n",
            "node_modules/pkg/index.js": "butler{ broken\n",
            "logo.png": b"\x89PNG\r\n\x1a\n\x00butler{ x }",
            ".github/workflow.yml": "name: butler{ project.name }\n",
        },
    )


@pytest.fixture
def config(template_dir: Path) -> ButlerConfig:
    return ButlerConfig(
        templates=[TemplateSource(name="basic", url=str(template_dir))],
        variables={"company": "Configured Inc", "team": "platform"},
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(staging_root=tmp_path / "staging", workers=2)
