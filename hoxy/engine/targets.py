"""
Resolved request targets.
PathResolver produces exactly one of these per request; the response stage consumes it and drops it.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

# NotFound reasons
MISSING = "missing"
TRAVERSAL = "traversal"


@dataclass(frozen=True)
class File:
    """A regular file addressed directly by the request path."""
    path: Path
    size: int
    logical_path: str

    kind = "file"


@dataclass(frozen=True)
class DirectoryIndex:
    """index.html inside a requested directory."""
    path: Path
    size: int
    logical_path: str  # request path + /index.html, "/index.html" for the root

    kind = "directory_index"


@dataclass(frozen=True)
class DirectoryListing:
    """A directory without index.html; entries keep filesystem enumeration order."""
    path: Path
    request_path: str
    entries: tuple[str, ...] = field(default_factory=tuple)

    kind = "directory_listing"


@dataclass(frozen=True)
class SPAFallback:
    """Root index.html served for a path that matched nothing."""
    path: Path
    size: int
    logical_path: str = "/index.html"

    kind = "spa_fallback"


@dataclass(frozen=True)
class NotFound:
    request_path: str
    reason: str = MISSING

    kind = "not_found"


ResolvedTarget = Union[File, DirectoryIndex, DirectoryListing, SPAFallback, NotFound]

# Targets whose content is a file on disk
FileTarget = Union[File, DirectoryIndex, SPAFallback]


def target_to_dict(target: ResolvedTarget) -> dict[str, Any]:
    """JSON-friendly view of a target, used in debug logging."""
    out: dict[str, Any] = {"kind": target.kind}
    for name in target.__dataclass_fields__:
        value = getattr(target, name)
        if isinstance(value, Path):
            value = str(value)
        elif isinstance(value, tuple):
            value = list(value)
        out[name] = value
    return out
