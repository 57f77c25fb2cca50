"""permfs — an in-memory, permissioned file system.

Re-exports public symbols so callers can write::

    from permfs import FileSystemEngine, PathNotFoundError
"""

from permfs.config import FileSystemConfig, load_config
from permfs.engine import FileSystemEngine
from permfs.errors import (
    FileSystemError,
    FsPermissionError,
    InvalidOperationError,
    InvalidPathError,
    InvalidPermissionSpecError,
    PathAlreadyExistsError,
    PathNotFoundError,
    PermissionError,  # noqa: A004
)
from permfs.logging import LogEntry, Logger, LogLevel
from permfs.nodes import Directory, File, Node, NodeInfo, NodeType
from permfs.permissions import ROOT_USER, PermissionSet, Right
from permfs.users import UserAccount, UserRegistry

__all__ = [
    "ROOT_USER",
    "Directory",
    "File",
    "FileSystemConfig",
    "FileSystemEngine",
    "FileSystemError",
    "FsPermissionError",
    "InvalidOperationError",
    "InvalidPathError",
    "InvalidPermissionSpecError",
    "LogEntry",
    "LogLevel",
    "Logger",
    "Node",
    "NodeInfo",
    "NodeType",
    "PathAlreadyExistsError",
    "PathNotFoundError",
    "PermissionError",
    "PermissionSet",
    "Right",
    "UserAccount",
    "UserRegistry",
    "load_config",
]
