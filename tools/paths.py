from __future__ import annotations

import os
from pathlib import Path


class PathResolver:
    """Joins caller-supplied paths under the project root.

    This is a plain join, not a sandbox: ``..`` segments are honoured and may
    leave the root.
    """

    def __init__(self, root: Path):
        self.root = Path(root).absolute()

    def resolve(self, relative: str | None = None) -> Path:
        text = (relative or ".").lstrip("/\\") or "."
        return Path(os.path.normpath(self.root / text))

    def display(self, relative: str | None, name: str) -> str:
        return os.path.normpath(os.path.join(relative or ".", name))
