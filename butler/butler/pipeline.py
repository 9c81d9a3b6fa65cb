"""Single entry point: materialize a template into a new project."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Mapping

from . import __version__
from .core.context import build_context
from .core.errors import DestinationExistsError, TemplateNotFoundError, UserCancelled
from .core.models import ButlerConfig, ProjectData, TemplateDescriptor
from .core.settings import Settings
from .core.summary import RunSummary
from .hooks.githooks import install_git_hooks
from .hooks.runner import HookRunner
from .materialize.directories import DirectoryRenamer
from .materialize.exclusion import ExclusionFilter
from .materialize.files import FileMaterializer
from .materialize.staging import StagingArea, confirmation_message
from .materialize.unpack import unpack
from .rendering import TemplateEvaluator
from .survey.descriptor import check_compatibility, load_descriptor
from .survey.prompts import Confirm, PromptSurvey, Survey, prompt_confirm

logger = logging.getLogger(__name__)

Unpacker = Callable[[str, Path], None]


class Materialization:
    """Clone, survey, template, confirm, commit and run hooks.

    Collaborators for unpacking, the survey and the final confirmation are
    injected so the run can be driven declaratively.
    """

    def __init__(
        self,
        config: ButlerConfig,
        settings: Settings | None = None,
        *,
        unpacker: Unpacker = unpack,
        survey: Survey | None = None,
        confirm: Confirm = prompt_confirm,
        exclusion: ExclusionFilter | None = None,
        variables: Mapping[str, Any] | None = None,
    ) -> None:
        self.config = config
        self.settings = settings or Settings()
        self.unpacker = unpacker
        self.survey = survey or PromptSurvey()
        self.confirm = confirm
        self.exclusion = exclusion or ExclusionFilter()
        self.variables = dict(variables or {})

    def _check_destination(self, destination: Path) -> None:
        if destination.exists() and (
            not destination.is_dir() or any(destination.iterdir())
        ):
            raise DestinationExistsError(destination)

    def materialize(
        self, root: Path, evaluator: TemplateEvaluator, summary: RunSummary
    ) -> None:
        """Directory pass, then the parallel file pass, over the staging tree."""
        errors = DirectoryRenamer(evaluator, self.exclusion).run(root)
        jobs, file_errors = FileMaterializer(evaluator, self.exclusion).run(
            root, self.settings.workers
        )
        summary.jobs = jobs
        summary.errors = errors + file_errors

    def run_hooks(
        self,
        descriptor: TemplateDescriptor | None,
        evaluator: TemplateEvaluator,
        destination: Path,
        summary: RunSummary,
    ) -> None:
        with summary.track("hooks"):
            if descriptor and descriptor.after_hooks:
                runner = HookRunner(evaluator, destination)
                summary.hook_errors = runner.run(descriptor.after_hooks)
            else:
                logger.debug("No after-hooks declared")
            install_git_hooks(destination)

    def run(self, project: ProjectData) -> RunSummary:
        """Run the whole materialization for ``project``.

        Returns:
            Phase timings and the collected error records

        Raises:
            UserCancelled: when the final confirmation is declined
            ButlerError: on setup, commit or required hook failures
        """
        source = self.config.get_template(project.template)
        if source is None:
            raise TemplateNotFoundError(project.template)

        destination = project.path.expanduser().resolve()
        self._check_destination(destination)
        summary = RunSummary(destination=destination)

        with StagingArea(
            self.settings.staging_root, keep=self.settings.keep_staging
        ) as staging:
            with summary.track("unpack"):
                self.unpacker(source.url, staging.root)

            descriptor = load_descriptor(staging.root / self.settings.survey_file)
            answers: dict[str, Any] = {}
            if descriptor is not None:
                check_compatibility(descriptor, __version__)
                answers = self.survey.ask(descriptor.questions)
                logger.debug(f"Survey results {answers}")

            with summary.track("materialize"):
                context = build_context(
                    project,
                    static_variables=self.config.variables,
                    descriptor=descriptor,
                    answers=answers,
                    overrides=self.variables,
                )
                evaluator = TemplateEvaluator.prepare(context)
                self.materialize(staging.root, evaluator, summary)

            for record in summary.errors:
                logger.debug(f"Error record: {record}")

            message = confirmation_message(len(summary.errors), destination)
            if not self.confirm(message):
                raise UserCancelled(f"Nothing was written to {destination}")

            staging.commit(destination, self.settings.survey_file)

        self.run_hooks(descriptor, evaluator, destination, summary)
        return summary
