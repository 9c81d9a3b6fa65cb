"""Writing rendered output over staged files."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path


def replace_text(path: Path, text: str, mode: int) -> None:
    """Replace ``path`` with ``text`` in one rename.

    The temporary file is created next to ``path`` so the final rename never
    crosses a filesystem; the staged file's permission bits are carried over.
    Line endings are written exactly as rendered.

    Args:
        path: Staged file to create or overwrite
        text: Rendered content
        mode: Permission bits of the source file
    """
    fd, tmp_name = tempfile.mkstemp(prefix=".butler-", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as tmp:
            tmp.write(text)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.remove(tmp_name)
