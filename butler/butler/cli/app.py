"""Main CLI application."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click
import typer
from typing_extensions import Annotated

from .. import __version__
from ..core.errors import ButlerError, UserCancelled
from ..core.models import ProjectData
from ..core.settings import Settings, load_config
from ..pipeline import Materialization
from ..survey.prompts import AnswersSurvey, PromptSurvey, always_confirm, prompt_confirm
from .parsers import parse_answers_file, parse_project_name, parse_variable, parse_workers

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="butler",
    help="Your personal assistant to scaffold projects from templates.",
    no_args_is_help=True,
)


@app.callback()
def configure(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Butler scaffolds new projects from template repositories."""
    settings = Settings()
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


@app.command()
def new(
    template: Annotated[
        Optional[str],
        typer.Option("--template", "-t", help="Template name from the configuration."),
    ] = None,
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Project name (0-9, A-Z, a-z, -)."),
    ] = None,
    description: Annotated[
        Optional[str],
        typer.Option("--description", "-d", help="Project description."),
    ] = None,
    path: Annotated[
        Optional[Path],
        typer.Option("--path", "-p", help="Destination of the new project."),
    ] = None,
    answers: Annotated[
        Optional[Path],
        typer.Option(
            "--answers",
            help="YAML file answering the template survey instead of prompting.",
            metavar="FILE",
            callback=parse_answers_file,
        ),
    ] = None,
    variables: Annotated[
        Optional[list[str]],
        typer.Option(
            "--var",
            help="Set a template variable (format: KEY=VALUE). Repeatable.",
            metavar="KEY=VALUE",
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Create the project without asking."),
    ] = False,
    workers: Annotated[
        Optional[int],
        typer.Option(
            "--workers", help="Number of templating threads.", callback=parse_workers
        ),
    ] = None,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file.", metavar="FILE"),
    ] = None,
    keep_staging: Annotated[
        bool,
        typer.Option("--keep-staging", help="Keep the staging directory for debugging."),
    ] = False,
) -> None:
    """Create a new project from a template."""
    settings = Settings()
    updates: dict[str, object] = {}
    if workers is not None:
        updates["workers"] = workers
    if config_file is not None:
        updates["config_file"] = config_file
    if keep_staging:
        updates["keep_staging"] = True
    settings = settings.model_copy(update=updates)

    try:
        config = load_config(settings.config_file)
    except ButlerError as e:
        logger.error(str(e))
        raise typer.Exit(1) from e

    if template is None:
        options = config.template_names()
        if not options:
            logger.error(f"No templates configured in {settings.config_file}")
            raise typer.Exit(1)
        template = typer.prompt(
            "What system are you using?", type=click.Choice(options)
        )
    if name is None:
        name = typer.prompt("What is the project name?")
    if description is None:
        description = typer.prompt(
            "What is the project description?", default="", show_default=False
        )
    if path is None:
        path = Path(typer.prompt("What is the destination?", default="src"))

    project = ProjectData(
        name=parse_project_name(name),
        path=path,
        template=template,
        description=description,
    )
    logger.debug(f"Project: {project}")

    overrides = dict(map(parse_variable, variables or []))

    try:
        command = Materialization(
            config,
            settings,
            survey=AnswersSurvey.from_file(answers) if answers else PromptSurvey(),
            confirm=always_confirm if yes else prompt_confirm,
            variables=overrides,
        )
        summary = command.run(project)
    except UserCancelled as e:
        typer.echo(f"Cancelled. {e}")
        raise typer.Exit(0) from e
    except ButlerError as e:
        logger.error(str(e))
        raise typer.Exit(1) from e

    typer.echo(summary.format())


@app.command()
def templates(
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file.", metavar="FILE"),
    ] = None,
) -> None:
    """List the configured templates."""
    settings = Settings()
    try:
        config = load_config(config_file or settings.config_file)
    except ButlerError as e:
        logger.error(str(e))
        raise typer.Exit(1) from e

    for template in sorted(config.templates, key=lambda t: t.name):
        typer.echo(f"{template.name}\t{template.url}")


@app.command()
def version() -> None:
    """Print the butler version."""
    typer.echo(f"Version: {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
