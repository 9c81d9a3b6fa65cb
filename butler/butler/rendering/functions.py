"""Functions available inside templates."""

from __future__ import annotations

import os
import random
import re
import uuid as _uuid
from typing import Any, Callable, Iterable

from ..core.context import VariableContext

_WORD_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


def _words(value: Any) -> list[str]:
    return _WORD_PATTERN.findall(str(value))


def snake_case(value: Any) -> str:
    return "_".join(word.lower() for word in _words(value))


def pascal_case(value: Any) -> str:
    return "".join(word[:1].upper() + word[1:].lower() for word in _words(value))


def camel_case(value: Any) -> str:
    pascal = pascal_case(value)
    return pascal[:1].lower() + pascal[1:]


def upper(value: Any) -> str:
    return str(value).upper()


def lower(value: Any) -> str:
    return str(value).lower()


def join(items: Iterable[Any], sep: str = "") -> str:
    return sep.join(str(item) for item in items)


def split(value: Any, sep: str | None = None) -> list[str]:
    return str(value).split(sep)


def replace(value: Any, old: str, new: str, count: int = -1) -> str:
    return str(value).replace(old, new, count)


def contains(value: Any, sub: Any) -> bool:
    return sub in value


def index(value: Any, sub: str) -> int:
    """Position of ``sub`` in ``value``, -1 when absent."""
    return str(value).find(sub)


def repeat(value: Any, count: int) -> str:
    return str(value) * count


def path_join(*parts: Any) -> str:
    return os.path.join(*(str(part) for part in parts))


def path_base(path: Any) -> str:
    return os.path.basename(str(path))


def path_ext(path: Any) -> str:
    return os.path.splitext(str(path))[1]


def path_abs(path: Any) -> str:
    return os.path.abspath(str(path))


def path_rel(path: Any, start: Any | None = None) -> str:
    return os.path.relpath(str(path), str(start) if start is not None else None)


def regex(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


def random_int(low: int, high: int) -> int:
    return random.randint(low, high)


def uuid() -> str:
    return str(_uuid.uuid4())


def cwd() -> str:
    return os.getcwd()


def env(name: str, default: str = "") -> str:
    return os.environ.get(name, default)


DEFAULT_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "camel_case": camel_case,
    "pascal_case": pascal_case,
    "snake_case": snake_case,
    "upper": upper,
    "lower": lower,
    "join": join,
    "split": split,
    "replace": replace,
    "contains": contains,
    "index": index,
    "repeat": repeat,
    "path_join": path_join,
    "path_base": path_base,
    "path_ext": path_ext,
    "path_abs": path_abs,
    "path_rel": path_rel,
    "regex": regex,
    "random_int": random_int,
    "uuid": uuid,
    "cwd": cwd,
    "env": env,
}

# Single-argument transforms are also usable as filters: { Name | snake_case }
STRING_FILTERS: dict[str, Callable[..., Any]] = {
    "camel_case": camel_case,
    "pascal_case": pascal_case,
    "snake_case": snake_case,
}


def build_functions(context: VariableContext) -> dict[str, Callable[..., Any]]:
    """Default registry plus the answer and question lookups for ``context``."""
    functions = dict(DEFAULT_FUNCTIONS)
    functions["answer"] = context.answer
    functions["question"] = context.question
    return functions
