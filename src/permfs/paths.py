"""Path parsing and resolution.

A path such as ``/docs/notes/todo.txt`` is split into segments
(``["docs", "notes", "todo.txt"]``) and walked from the root directory,
looking each name up in the current directory's children.

Two resolution modes are offered:

- **direct** (``resolve``) — the target must exist; returns the node
  together with the chain of directories walked to reach it.
- **parent** (``resolve_parent``) — walks every segment but the last,
  returning the parent directory and the final name, which may or may
  not exist yet.  Creation, deletion, move and copy use this mode.

Only absolute paths are accepted.  ``.`` and ``..`` are rejected rather
than interpreted, and a File can never be walked through.
"""

from __future__ import annotations

from dataclasses import dataclass

from permfs.errors import InvalidOperationError, InvalidPathError, PathNotFoundError
from permfs.nodes import Directory, Node

SEPARATOR = "/"
ROOT_PATH = "/"


def split_path(path: str) -> list[str]:
    """Validate *path* and return its segments.

    Examples::

        "/"                 -> []
        "/hello.txt"        -> ["hello.txt"]
        "/docs/readme.txt"  -> ["docs", "readme.txt"]
        "/docs/"            -> ["docs"]

    Raises:
        InvalidPathError: If the path is not absolute, contains an empty
            segment, or uses ``.`` / ``..``.

    """
    if not path.startswith(SEPARATOR):
        msg = f"Path must be absolute: {path!r}"
        raise InvalidPathError(msg, path=path)
    if path == ROOT_PATH:
        return []
    trimmed = path[1:-1] if path.endswith(SEPARATOR) else path[1:]
    segments = trimmed.split(SEPARATOR)
    for segment in segments:
        if not segment:
            msg = f"Empty path segment in {path!r}"
            raise InvalidPathError(msg, path=path)
        if segment in (".", ".."):
            msg = f"Relative segment {segment!r} not supported in {path!r}"
            raise InvalidPathError(msg, path=path)
    return segments


def join_path(segments: list[str]) -> str:
    """Build an absolute path from *segments* (``[]`` gives ``/``)."""
    return SEPARATOR + SEPARATOR.join(segments)


@dataclass
class Resolution:
    """Result of a direct resolution.

    ``chain`` holds every directory walked, starting with the root and
    ending with the target's parent (empty when the target is the root).
    """

    node: Node
    path: str
    segments: list[str]
    chain: list[Directory]


@dataclass
class ParentResolution:
    """Result of a parent-mode resolution."""

    parent: Directory
    name: str
    path: str
    parent_path: str
    segments: list[str]

    @property
    def existing(self) -> Node | None:
        """Return the node currently occupying the final name, if any."""
        return self.parent.get(self.name)


def _walk(root: Directory, segments: list[str], path: str) -> tuple[Node, list[Directory]]:
    """Follow *segments* from *root* and return the node plus the chain.

    Raises:
        PathNotFoundError: Naming the first segment that is missing or
            that would require walking through a File.

    """
    current: Node = root
    chain: list[Directory] = []
    for index, segment in enumerate(segments):
        if not isinstance(current, Directory):
            failed = join_path(segments[:index])
            msg = f"Not a directory: {failed} (resolving {path})"
            raise PathNotFoundError(msg, path=failed)
        child = current.get(segment)
        if child is None:
            failed = join_path(segments[: index + 1])
            msg = f"Path not found: {failed}"
            raise PathNotFoundError(msg, path=failed)
        chain.append(current)
        current = child
    return current, chain


def resolve(root: Directory, path: str) -> Resolution:
    """Resolve *path* to an existing node.

    Raises:
        InvalidPathError: If *path* is malformed.
        PathNotFoundError: If any segment does not exist.

    """
    segments = split_path(path)
    node, chain = _walk(root, segments, path)
    return Resolution(node=node, path=join_path(segments), segments=segments, chain=chain)


def resolve_parent(root: Directory, path: str) -> ParentResolution:
    """Resolve the directory that holds (or would hold) *path*.

    Raises:
        InvalidPathError: If *path* is malformed.
        InvalidOperationError: If *path* is the root, which has no parent.
        PathNotFoundError: If the parent is missing or is not a directory.

    """
    segments = split_path(path)
    if not segments:
        msg = "The root directory has no parent"
        raise InvalidOperationError(msg, path=ROOT_PATH)
    parent_segments = segments[:-1]
    parent_path = join_path(parent_segments)
    parent, _ = _walk(root, parent_segments, path)
    if not isinstance(parent, Directory):
        msg = f"Not a directory: {parent_path}"
        raise PathNotFoundError(msg, path=parent_path)
    return ParentResolution(
        parent=parent,
        name=segments[-1],
        path=join_path(segments),
        parent_path=parent_path,
        segments=segments,
    )


def is_within(segments: list[str], ancestor: list[str]) -> bool:
    """Return whether *segments* equals or lies below *ancestor*."""
    return segments[: len(ancestor)] == ancestor
