"""Decides which staging entries take part in templating."""

from __future__ import annotations

import enum
import os
from typing import Iterable

DEFAULT_EXCLUDED_DIRS = frozenset(
    {
        "node_modules",
        "bower_components",
        "jspm_packages",
        "dist",
        "build",
        "log",
        "logs",
        "bin",
        "lib",
        "typings",
    }
)

DEFAULT_BINARY_EXTENSIONS = frozenset(
    {
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".tif", ".tiff", ".webp",
        ".psd", ".svgz",
        ".woff", ".woff2", ".ttf", ".otf", ".eot",
        ".mp3", ".mp4", ".wav", ".ogg", ".avi", ".mov", ".webm", ".flac",
        ".zip", ".gz", ".tgz", ".bz2", ".xz", ".7z", ".rar", ".tar", ".jar", ".war",
        ".nupkg",
        ".exe", ".dll", ".so", ".dylib", ".o", ".a", ".lib", ".pdb", ".class",
        ".pyc", ".pyo", ".bin", ".dat", ".db", ".sqlite",
        ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
        ".snk", ".pfx", ".p12",
    }
)


class Decision(enum.Enum):
    PROCEED = "proceed"
    SKIP_ENTRY = "skip-entry"
    SKIP_SUBTREE = "skip-subtree"


class ExclusionFilter:
    """Skips hidden entries, dependency/output directories and binary files.

    The same instance is consulted by the directory pass and the file pass.
    """

    def __init__(
        self,
        excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
        binary_extensions: Iterable[str] = DEFAULT_BINARY_EXTENSIONS,
    ) -> None:
        self.excluded_dirs = frozenset(excluded_dirs)
        self.binary_extensions = frozenset(ext.lower() for ext in binary_extensions)

    def decide(self, name: str, is_dir: bool) -> Decision:
        if len(name) > 1 and name.startswith("."):
            return Decision.SKIP_SUBTREE if is_dir else Decision.SKIP_ENTRY
        if is_dir:
            if name in self.excluded_dirs:
                return Decision.SKIP_SUBTREE
            return Decision.PROCEED
        if os.path.splitext(name)[1].lower() in self.binary_extensions:
            return Decision.SKIP_ENTRY
        return Decision.PROCEED

    def walk(self, root: os.PathLike[str] | str) -> Iterable[tuple[str, list[str], list[str]]]:
        """``os.walk`` over ``root`` with excluded entries pruned.

        Yields:
            ``(dirpath, dirnames, filenames)`` with only proceeding entries
        """
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(
                d for d in dirnames if self.decide(d, True) is Decision.PROCEED
            )
            kept_files = sorted(
                f for f in filenames if self.decide(f, False) is Decision.PROCEED
            )
            yield dirpath, dirnames, kept_files
