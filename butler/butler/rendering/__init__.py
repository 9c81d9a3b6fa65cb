"""Jinja2 evaluation of templated names, contents and conditions."""

from .engine import TemplateEvaluator

__all__ = ["TemplateEvaluator"]
