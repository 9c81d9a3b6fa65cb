"""Template evaluation for names, contents and hook conditions."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from jinja2 import Environment, StrictUndefined

from ..core.context import VariableContext
from ..core.errors import TemplateError
from .functions import STRING_FILTERS, build_functions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Delimiters:
    variable_start: str
    variable_end: str
    block_start: str
    block_end: str
    comment_start: str
    comment_end: str


NAME_DELIMITERS = Delimiters("{", "}", "{%", "%}", "{#", "#}")
CONTENT_DELIMITERS = Delimiters(
    "butler{", "}", "butler{%", "%}", "butler{#", "#}"
)
CONDITION_DELIMITERS = Delimiters("{{", "}}", "{%", "%}", "{#", "#}")


def is_plain_name(name: str) -> bool:
    """True when ``name`` is one path segment: no separator, no NUL, not . or ..
    and not absolute."""
    if name in (".", "..") or "\x00" in name or os.path.isabs(name):
        return False
    return not any(sep and sep in name for sep in (os.sep, os.altsep))


def create_environment(
    delimiters: Delimiters, functions: Mapping[str, Callable[..., Any]]
) -> Environment:
    """Create a Jinja2 environment for one delimiter pair.

    Args:
        delimiters: Delimiter set of the environment
        functions: Registry exposed as template globals

    Returns:
        Configured environment
    """
    env = Environment(
        variable_start_string=delimiters.variable_start,
        variable_end_string=delimiters.variable_end,
        block_start_string=delimiters.block_start,
        block_end_string=delimiters.block_end,
        comment_start_string=delimiters.comment_start,
        comment_end_string=delimiters.comment_end,
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.globals.update(functions)
    env.filters.update(STRING_FILTERS)
    return env


class TemplateEvaluator:
    """Renders templated strings against one frozen variable context.

    Instances are read-only after construction and may be shared across
    worker threads.
    """

    def __init__(self, context: VariableContext) -> None:
        self.context = context
        self.functions = build_functions(context)
        self._data = context.to_template_context()
        self._name_env = create_environment(NAME_DELIMITERS, self.functions)
        self._content_env = create_environment(CONTENT_DELIMITERS, self.functions)
        self._condition_env = create_environment(CONDITION_DELIMITERS, self.functions)

    @classmethod
    def prepare(cls, context: VariableContext) -> TemplateEvaluator:
        """Resolve self-templating variables once and freeze the result."""
        return cls(cls(context).resolve_variables())

    def _render(self, env: Environment, name: str, text: str) -> str:
        try:
            return env.from_string(text).render(self._data)
        except Exception as e:
            # registry functions and template expressions run arbitrary code
            raise TemplateError(name, f"{type(e).__name__}: {e}") from e

    def render_name(self, name: str, text: str) -> str:
        """Render a file or directory base name.

        The result must stay a single path segment in the same parent
        directory; a blank result is returned as is.

        Raises:
            TemplateError: when rendering fails or the result is not a plain name
        """
        rendered = self._render(self._name_env, name, text)
        if rendered.strip() and not is_plain_name(rendered):
            raise TemplateError(name, f"rendered name {rendered!r} is not a plain file name")
        return rendered

    def render_content(self, name: str, text: str) -> str:
        """Render a file body."""
        return self._render(self._content_env, name, text)

    def render_condition(self, name: str, expression: str) -> bool:
        """Evaluate a boolean expression such as a hook's enabled condition."""
        sentinel = "{% if " + expression + " %}true{% endif %}"
        return self._render(self._condition_env, name, sentinel) == "true"

    def resolve_variables(self) -> VariableContext:
        """Run string variables through the content evaluator once.

        Returns:
            A new context whose string variables are rendered
        """
        resolved: dict[str, Any] = {}
        for key, value in self.context.variables.items():
            if isinstance(value, str) and CONTENT_DELIMITERS.variable_start in value:
                resolved[key] = self.render_content(f"variable {key}", value)
                logger.debug(f"Resolved variable {key!r}")
            else:
                resolved[key] = value
        return self.context.model_copy(update={"variables": resolved})
