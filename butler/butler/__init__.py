"""Butler - project scaffolding from parametrized template repositories.

Clones a template, collects variables, renders names and contents with Jinja2,
runs after-hooks and commits the result to its destination.
"""

__version__ = "1.2.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Re-export main CLI entry point
from .cli import main

__all__ = ["__version__", "main"]
