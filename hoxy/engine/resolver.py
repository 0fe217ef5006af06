"""
Request path resolution.
Maps (root, request path, SPA flag) to a ResolvedTarget:
File, DirectoryIndex, DirectoryListing, SPAFallback or NotFound.
"""

import logging
import os
import stat
from pathlib import Path

from hoxy.config import INDEX_FILE
from hoxy.engine.targets import (
    MISSING,
    TRAVERSAL,
    DirectoryIndex,
    DirectoryListing,
    File,
    NotFound,
    ResolvedTarget,
    SPAFallback,
)

logger = logging.getLogger(__name__)


class FilesystemError(Exception):
    """The filesystem refused a lookup for a reason other than 'not found'."""

    def __init__(self, path: Path, cause: BaseException):
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause


def _stat(path: Path) -> os.stat_result | None:
    """stat() that maps 'does not exist' to None and everything else to FilesystemError."""
    try:
        return os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        return None
    except OSError as e:
        raise FilesystemError(path, e) from e


def _contained_path(root: Path, request_path: str) -> Path | None:
    """
    Canonical absolute path for request_path under root, or None if it escapes root.
    Both sides are fully resolved (symlinks included) before the containment check.
    """
    relative = request_path.lstrip("/")
    try:
        candidate = (root / relative).resolve()
    except ValueError:
        # embedded NUL byte
        return None
    except (OSError, RuntimeError) as e:
        raise FilesystemError(root / relative, e) from e
    try:
        candidate.relative_to(root)
    except ValueError:
        return None
    return candidate


def _index_logical_path(request_path: str) -> str:
    trimmed = request_path.rstrip("/")
    return f"{trimmed}/{INDEX_FILE}" if trimmed else f"/{INDEX_FILE}"


def _spa_fallback(root: Path) -> SPAFallback | None:
    index_path = root / INDEX_FILE
    st = _stat(index_path)
    if st is None or not stat.S_ISREG(st.st_mode):
        return None
    return SPAFallback(path=index_path, size=st.st_size)


def _list_directory(path: Path) -> tuple[str, ...]:
    try:
        return tuple(os.listdir(path))
    except OSError as e:
        raise FilesystemError(path, e) from e


def resolve(root: Path, request_path: str, spa_enabled: bool) -> ResolvedTarget:
    """
    Classify what request_path names under root.

    Order:
    1. Paths escaping root (after canonicalization) are NotFound, whatever exists out there.
    2. Regular file -> File.
    3. Directory -> DirectoryIndex if it holds index.html, else DirectoryListing.
    4. Nothing matched and SPA enabled with a root index.html -> SPAFallback.
    5. NotFound.

    Raises FilesystemError for permission/I/O failures.
    """
    root = root.resolve()
    target = _contained_path(root, request_path)
    if target is None:
        logger.debug("Rejected path outside root: %r", request_path)
        return NotFound(request_path=request_path, reason=TRAVERSAL)

    st = _stat(target)
    # resolve() drops a trailing slash; "file.js/" must not name the file
    if st is not None and request_path.endswith("/") and not stat.S_ISDIR(st.st_mode):
        st = None

    if st is not None and stat.S_ISREG(st.st_mode):
        return File(path=target, size=st.st_size, logical_path=request_path)

    if st is not None and stat.S_ISDIR(st.st_mode):
        index_path = target / INDEX_FILE
        index_st = _stat(index_path)
        if index_st is not None and stat.S_ISREG(index_st.st_mode):
            return DirectoryIndex(
                path=index_path,
                size=index_st.st_size,
                logical_path=_index_logical_path(request_path),
            )
        return DirectoryListing(
            path=target,
            request_path=request_path,
            entries=_list_directory(target),
        )

    if spa_enabled:
        fallback = _spa_fallback(root)
        if fallback is not None:
            return fallback

    return NotFound(request_path=request_path, reason=MISSING)
