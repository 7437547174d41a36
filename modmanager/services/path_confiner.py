import os
from typing import Optional

from .errors import InvalidPath


def resolve(root: str, relative_path: Optional[str]) -> str:
    """Resolve ``relative_path`` against ``root`` without touching the disk.

    The result is either ``root`` itself or a descendant of it. Anything else
    (``..`` escapes, absolute overrides, missing input) raises InvalidPath.
    """
    if relative_path is None or "\x00" in relative_path:
        raise InvalidPath("Invalid path")

    base = os.path.normpath(os.path.abspath(root))
    raw = relative_path.replace("\\", "/")
    target = os.path.normpath(os.path.join(base, raw))
    if not is_within(base, target):
        raise InvalidPath("Invalid path")
    return target


def is_within(root: str, path: str) -> bool:
    if path == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(prefix)
