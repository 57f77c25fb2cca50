"""Exceptions raised by the file system engine.

Every failure the engine can report is a subclass of
``FileSystemError``, so callers can catch the whole family at once or
pick out a single condition:

- **PathNotFoundError** — a segment is missing, a File sits where a
  Directory was needed (or the reverse).
- **PathAlreadyExistsError** — the name is already taken in its parent.
- **PermissionError** — the acting identity lacks a right.
- **InvalidOperationError** — the request makes no sense for the node
  (``rm`` on a non-empty directory without ``recursive``, removing root).
- **InvalidPathError** / **InvalidPermissionSpecError** — malformed
  arguments; these are also ``ValueError`` subclasses.
"""


class FileSystemError(Exception):
    """Base class for every error the engine reports."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        """Store the message and the path that triggered the error."""
        super().__init__(message)
        self.path = path


class PathNotFoundError(FileSystemError):
    """Raised when a path does not resolve to a usable node."""


class PathAlreadyExistsError(FileSystemError):
    """Raised when a creation, move, or copy target is already occupied."""


# We define our own PermissionError to avoid shadowing the built-in
# outside this package.  Import it as FsPermissionError when both are needed.
class PermissionError(FileSystemError):  # noqa: A001
    """Raised when a user lacks the right required for an operation."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        user: str | None = None,
        right: str | None = None,
    ) -> None:
        """Record who was denied what, and where."""
        super().__init__(message, path=path)
        self.user = user
        self.right = right


FsPermissionError = PermissionError


class InvalidOperationError(FileSystemError):
    """Raised when an operation is incompatible with the resolved node."""


class InvalidPathError(FileSystemError, ValueError):
    """Raised when a path string is syntactically malformed."""


class InvalidPermissionSpecError(FileSystemError, ValueError):
    """Raised when a permission string contains unknown characters."""
