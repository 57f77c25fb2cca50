"""The file system engine: the tree plus every operation on it.

``FileSystemEngine`` owns the root directory and exposes the familiar
command set: ``mkdir``, ``touch``, ``chmod``, ``rm``, ``write``,
``read``, ``mv``, ``ls`` and ``cp``.  Each call follows the same three
steps:

1. **Resolve** the path(s) against the tree (see ``permfs.paths``).
2. **Check** the acting user's rights (see ``permfs.permissions``).
3. **Apply** the change or read the data in place.

Every check for an operation runs before the first mutation, so a
failing ``mv``, ``cp`` or recursive ``rm`` leaves the tree exactly as
it was.

All operations take the acting user explicitly; the engine keeps no
notion of a "current user".  One re-entrant lock guards the whole tree
for the duration of each call, which is enough for ``mv`` to unlink
from one directory and link into another without anyone observing the
half-moved state.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

from permfs.config import FileSystemConfig
from permfs.errors import (
    InvalidOperationError,
    InvalidPathError,
    PathAlreadyExistsError,
    PathNotFoundError,
    PermissionError,
)
from permfs.logging import Logger, LogLevel
from permfs.nodes import Directory, File, Node, NodeInfo, copy_tree, new_permission_table
from permfs.paths import (
    ROOT_PATH,
    ParentResolution,
    is_within,
    join_path,
    resolve,
    resolve_parent,
    split_path,
)
from permfs.permissions import PermissionSet, Right, check_owner, check_permission
from permfs.users import SeedEntry, UserAccount, UserRegistry

_SOURCE = "fs"


class FileSystemEngine:
    """An in-memory, permissioned directory tree.

    The engine starts with a root directory owned by the superuser.
    Seed users (passed directly or through a ``FileSystemConfig``) each
    get a home directory that they own.
    """

    def __init__(
        self,
        users: Iterable[SeedEntry] | None = None,
        *,
        config: FileSystemConfig | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create the root directory and seed any home directories.

        Args:
            users: Accounts or ``(name, home[, permissions])`` tuples,
                added after any accounts listed in *config*.
            config: Superuser name, log level and seed users.
            logger: Audit log to write to; a new one is created at the
                configured level when omitted.

        Raises:
            ValueError: If two seed accounts share a name.
            InvalidOperationError: If a home path runs through a file.

        """
        config = config if config is not None else FileSystemConfig()
        self._superuser = config.superuser
        self._logger = logger if logger is not None else Logger(min_level=config.log_level)
        self._lock = threading.RLock()
        self._root = Directory(name=ROOT_PATH, owner=self._superuser)
        self._users = UserRegistry([*config.users, *(users or ())])
        for account in self._users:
            self._seed_home(account)

    # -- Properties ------------------------------------------------------------

    @property
    def root(self) -> Directory:
        """Return the root directory node."""
        return self._root

    @property
    def superuser(self) -> str:
        """Return the identity that bypasses every permission check."""
        return self._superuser

    @property
    def logger(self) -> Logger:
        """Return the audit log."""
        return self._logger

    @property
    def users(self) -> list[UserAccount]:
        """Return the seed accounts in registration order."""
        return self._users.list_users()

    # -- Construction helpers --------------------------------------------------

    def _seed_home(self, account: UserAccount) -> None:
        """Create *account*'s home, making missing parents as the superuser."""
        segments = split_path(account.home)
        current = self._root
        for index, segment in enumerate(segments):
            child = current.get(segment)
            if child is None:
                is_home = index == len(segments) - 1
                owner = account.name if is_home else self._superuser
                child = Directory(
                    name=segment,
                    owner=owner,
                    permissions=new_permission_table(owner, superuser=self._superuser),
                )
                current.attach(child)
            elif not isinstance(child, Directory):
                failed = join_path(segments[: index + 1])
                msg = f"Home directory for {account.name!r} runs through a file: {failed}"
                raise InvalidOperationError(msg, path=failed)
            current = child
        if account.name != self._superuser:
            current.permissions[account.name] = account.permission_set
        self._logger.log(
            LogLevel.INFO,
            f"Seeded user {account.name} with home {join_path(segments)}",
            source="users",
            user=account.name,
        )

    # -- Internal helpers ------------------------------------------------------

    def _check(self, node: Node, user: str, right: Right, path: str) -> None:
        """Check *right* on *node*, recording a denial in the audit log."""
        try:
            check_permission(node, user, right, path=path, superuser=self._superuser)
        except PermissionError as e:
            self._logger.log(LogLevel.WARNING, str(e), source=_SOURCE, user=user)
            raise

    def _resolve_file(self, path: str) -> tuple[File, str]:
        """Resolve *path* to a file, rejecting directories as not found."""
        resolution = resolve(self._root, path)
        if not isinstance(resolution.node, File):
            msg = f"Is a directory: {resolution.path}"
            raise PathNotFoundError(msg, path=resolution.path)
        return resolution.node, resolution.path

    def _resolve_target(self, path: str) -> tuple[ParentResolution, Node]:
        """Resolve *path* in parent mode and require the final name to exist."""
        target = resolve_parent(self._root, path)
        node = target.existing
        if node is None:
            msg = f"Path not found: {target.path}"
            raise PathNotFoundError(msg, path=target.path)
        return target, node

    def _require_vacant(self, target: ParentResolution) -> None:
        """Raise if the final name of *target* is already taken."""
        if target.existing is not None:
            msg = f"Already exists: {target.path}"
            raise PathAlreadyExistsError(msg, path=target.path)

    def _create(self, path: str, user: str, node_cls: type[File] | type[Directory]) -> None:
        """Create an empty node of *node_cls* owned by *user*."""
        if not split_path(path):
            msg = f"Already exists: {ROOT_PATH}"
            raise PathAlreadyExistsError(msg, path=ROOT_PATH)
        target = resolve_parent(self._root, path)
        self._require_vacant(target)
        self._check(target.parent, user, Right.WRITE, target.parent_path)
        node = node_cls(
            name=target.name,
            owner=user,
            permissions=new_permission_table(user, superuser=self._superuser),
        )
        target.parent.attach(node)

    # -- Structural operations -------------------------------------------------

    def mkdir(self, path: str, user: str) -> None:
        """Create an empty directory at *path* owned by *user*.

        Raises:
            PathNotFoundError: If the parent directory does not exist.
            PathAlreadyExistsError: If *path* already exists.
            PermissionError: If *user* lacks write on the parent.

        """
        with self._lock:
            self._create(path, user, Directory)
            self._logger.log(LogLevel.INFO, f"mkdir {path}", source=_SOURCE, user=user)

    def touch(self, path: str, user: str) -> None:
        """Create an empty file at *path* owned by *user*.

        Raises:
            PathNotFoundError: If the parent directory does not exist.
            PathAlreadyExistsError: If *path* already exists.
            PermissionError: If *user* lacks write on the parent.

        """
        with self._lock:
            self._create(path, user, File)
            self._logger.log(LogLevel.INFO, f"touch {path}", source=_SOURCE, user=user)

    def rm(self, path: str, user: str, recursive: bool = False) -> None:  # noqa: FBT001, FBT002
        """Remove the file or directory at *path*.

        Permission is checked once, against the parent.  A recursive
        removal drops the whole subtree regardless of what the
        descendants' own tables say.

        Raises:
            InvalidOperationError: If *path* is the root, or is a
                non-empty directory and *recursive* is false.
            PathNotFoundError: If *path* does not exist.
            PermissionError: If *user* lacks write on the parent.

        """
        with self._lock:
            if not split_path(path):
                msg = "Cannot remove the root directory"
                raise InvalidOperationError(msg, path=ROOT_PATH)
            target, node = self._resolve_target(path)
            self._check(target.parent, user, Right.WRITE, target.parent_path)
            if isinstance(node, Directory) and node.children and not recursive:
                msg = f"Directory not empty: {target.path}"
                raise InvalidOperationError(msg, path=target.path)
            target.parent.detach(target.name)
            verb = "rm -r" if recursive else "rm"
            self._logger.log(LogLevel.INFO, f"{verb} {target.path}", source=_SOURCE, user=user)

    def mv(self, source: str, dest: str, user: str) -> None:
        """Move (rename) *source* to *dest*.

        The node keeps its subtree, owner and permission table; only the
        parent link and the name change.

        Raises:
            InvalidOperationError: If *source* is the root or *dest* lies
                inside the directory being moved.
            PathNotFoundError: If *source* or the parent of *dest* is missing.
            PathAlreadyExistsError: If *dest* is already taken.
            PermissionError: If *user* lacks write on either parent.

        """
        with self._lock:
            if not split_path(source):
                msg = "Cannot move the root directory"
                raise InvalidOperationError(msg, path=ROOT_PATH)
            src, node = self._resolve_target(source)
            dst = resolve_parent(self._root, dest)
            self._require_vacant(dst)
            self._check(src.parent, user, Right.WRITE, src.parent_path)
            self._check(dst.parent, user, Right.WRITE, dst.parent_path)
            if isinstance(node, Directory) and is_within(dst.segments, src.segments):
                msg = f"Cannot move {src.path} into itself ({dst.path})"
                raise InvalidOperationError(msg, path=dst.path)
            src.parent.detach(src.name)
            node.name = dst.name
            dst.parent.attach(node)
            self._logger.log(
                LogLevel.INFO, f"mv {src.path} {dst.path}", source=_SOURCE, user=user
            )

    def cp(self, source: str, dest: str, user: str, recursive: bool = False) -> None:  # noqa: FBT001, FBT002
        """Copy *source* to *dest* as a fresh creation by *user*.

        The copy is deep: file bytes are duplicated and directories are
        rebuilt.  Every copied node is owned by *user*; the source's
        owners and grants are not carried over.

        Raises:
            PathNotFoundError: If *source* or the parent of *dest* is missing.
            PathAlreadyExistsError: If *dest* is already taken.
            PermissionError: If *user* lacks read on *source* or write
                on the destination parent.
            InvalidOperationError: If *source* is a directory and
                *recursive* is false.

        """
        with self._lock:
            src = resolve(self._root, source)
            dst = resolve_parent(self._root, dest)
            self._require_vacant(dst)
            self._check(src.node, user, Right.READ, src.path)
            self._check(dst.parent, user, Right.WRITE, dst.parent_path)
            if isinstance(src.node, Directory) and not recursive:
                msg = f"Cannot copy directory {src.path} without recursive"
                raise InvalidOperationError(msg, path=src.path)
            clone = copy_tree(src.node, name=dst.name, owner=user, superuser=self._superuser)
            dst.parent.attach(clone)
            verb = "cp -r" if recursive else "cp"
            self._logger.log(
                LogLevel.INFO, f"{verb} {src.path} {dst.path}", source=_SOURCE, user=user
            )

    def chmod(
        self,
        path: str,
        requesting_user: str,
        target_user: str,
        permission_spec: str,
    ) -> None:
        """Set *target_user*'s rights on *path* to exactly *permission_spec*.

        Only the node's owner or the superuser may do this.  The change
        applies to the node alone, never to its children.  Granting to
        the superuser stores nothing, since it already has every right.

        Raises:
            PathNotFoundError: If *path* does not exist.
            PermissionError: If *requesting_user* is neither the owner
                nor the superuser.
            InvalidPermissionSpecError: If *permission_spec* is malformed.

        """
        with self._lock:
            resolution = resolve(self._root, path)
            node = resolution.node
            try:
                check_owner(node, requesting_user, path=resolution.path, superuser=self._superuser)
            except PermissionError as e:
                self._logger.log(LogLevel.WARNING, str(e), source=_SOURCE, user=requesting_user)
                raise
            permissions = PermissionSet.parse(permission_spec)
            if target_user != self._superuser:
                node.permissions[target_user] = permissions
            self._logger.log(
                LogLevel.INFO,
                f"chmod {target_user}={permissions} {resolution.path}",
                source=_SOURCE,
                user=requesting_user,
            )

    # -- Content operations ----------------------------------------------------

    def write(self, path: str, user: str, append: bool, data: bytes) -> None:  # noqa: FBT001
        """Write *data* to the file at *path*.

        Args:
            path: Absolute path to an existing file.
            user: The acting identity.
            append: Add to the end instead of replacing the content.
            data: The bytes to write.

        Raises:
            PathNotFoundError: If *path* is missing or is a directory.
            PermissionError: If *user* lacks write on the file.

        """
        with self._lock:
            file, resolved = self._resolve_file(path)
            self._check(file, user, Right.WRITE, resolved)
            if append:
                file.append(data)
            else:
                file.overwrite(data)
            mode = "append" if append else "write"
            self._logger.log(
                LogLevel.INFO, f"{mode} {len(data)} bytes to {resolved}", source=_SOURCE, user=user
            )

    def read(self, path: str, user: str, buffer: bytearray | memoryview) -> int:
        """Copy the file's content into *buffer*.

        At most ``len(buffer)`` bytes are copied.  A larger buffer keeps
        its trailing bytes untouched; use the return value (or
        ``size``) to know how much is valid.

        Returns:
            The number of bytes copied.

        Raises:
            PathNotFoundError: If *path* is missing or is a directory.
            PermissionError: If *user* lacks read on the file.

        """
        with self._lock:
            file, resolved = self._resolve_file(path)
            self._check(file, user, Right.READ, resolved)
            copied = file.read_into(buffer)
            self._logger.log(
                LogLevel.DEBUG, f"read {copied} bytes from {resolved}", source=_SOURCE, user=user
            )
            return copied

    def read_bytes(self, path: str, user: str) -> bytes:
        """Return the whole content of the file at *path*.

        Raises:
            PathNotFoundError: If *path* is missing or is a directory.
            PermissionError: If *user* lacks read on the file.

        """
        with self._lock:
            buffer = bytearray(self.size(path, user))
            self.read(path, user, buffer)
            return bytes(buffer)

    def size(self, path: str, user: str) -> int:
        """Return the content length of the file at *path*.

        Raises:
            PathNotFoundError: If *path* is missing or is a directory.
            PermissionError: If *user* lacks read on the file.

        """
        with self._lock:
            file, resolved = self._resolve_file(path)
            self._check(file, user, Right.READ, resolved)
            return file.size

    # -- Queries ---------------------------------------------------------------

    def ls(self, path: str, user: str, recursive: bool = False) -> list[str]:  # noqa: FBT001, FBT002
        """List a directory.

        Non-recursive listings return child names in lexicographic
        order.  Recursive listings return every descendant's path
        relative to *path*, depth first and pre-order.  Read is checked
        once on *path*; descendants are not checked individually.

        Raises:
            PathNotFoundError: If *path* is missing or is a file.
            PermissionError: If *user* lacks read on the directory.

        """
        with self._lock:
            resolution = resolve(self._root, path)
            directory = resolution.node
            if not isinstance(directory, Directory):
                msg = f"Not a directory: {resolution.path}"
                raise PathNotFoundError(msg, path=resolution.path)
            self._check(directory, user, Right.READ, resolution.path)
            listing = list(directory.walk()) if recursive else directory.names()
            self._logger.log(
                LogLevel.DEBUG, f"ls {resolution.path}", source=_SOURCE, user=user
            )
            return listing

    def exists(self, path: str) -> bool:
        """Return whether *path* resolves (malformed paths never do)."""
        with self._lock:
            try:
                resolve(self._root, path)
            except (PathNotFoundError, InvalidPathError):
                return False
            return True

    def stat(self, path: str) -> NodeInfo:
        """Return a metadata snapshot for *path*.

        Raises:
            PathNotFoundError: If *path* does not exist.

        """
        with self._lock:
            resolution = resolve(self._root, path)
            return resolution.node.to_info(resolution.path)

    def get_permissions(self, path: str, user: str) -> PermissionSet:
        """Return the rights *user* effectively holds on *path*.

        The superuser and the owner always hold every right; anyone
        else gets their stored entry, or the empty set.

        Raises:
            PathNotFoundError: If *path* does not exist.

        """
        with self._lock:
            node = resolve(self._root, path).node
            if user in (self._superuser, node.owner):
                return PermissionSet.full()
            return node.permissions.get(user, PermissionSet())
