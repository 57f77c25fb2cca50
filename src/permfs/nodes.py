"""Tree nodes: directories and files.

The tree is a plain ownership hierarchy.  A ``Directory`` keeps its
children in a ``dict[str, Node]`` keyed by name, and each child object
lives in exactly one such dict.  Dropping a dict entry drops the whole
subtree with it, so there is no separate node table to keep in sync.

Unlike a real inode layout, the name is stored on the node itself.
Without hard links a node only ever has one name, so keeping it next to
the owner and the permission table makes snapshots and copies simpler.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from enum import StrEnum

from permfs.permissions import ROOT_USER, PermissionSet


class NodeType(StrEnum):
    """The kind of object a node represents."""

    FILE = "file"
    DIRECTORY = "directory"


def new_permission_table(owner: str, *, superuser: str = ROOT_USER) -> dict[str, PermissionSet]:
    """Return the table a freshly created node starts with.

    The creator gets ``rwx``.  The superuser is never stored.
    """
    if owner == superuser:
        return {}
    return {owner: PermissionSet.full()}


@dataclass(frozen=True)
class NodeInfo:
    """Read-only snapshot of a node's metadata (returned by ``stat``)."""

    path: str
    name: str
    node_type: NodeType
    owner: str
    size: int
    permissions: dict[str, str]
    child_count: int = 0


@dataclass(eq=False)
class Node:
    """Common state for files and directories.

    ``eq=False`` keeps identity comparison: two distinct empty files
    with the same name are still different nodes.
    """

    name: str
    owner: str
    permissions: dict[str, PermissionSet] = field(default_factory=dict)  # pyright: ignore[reportUnknownVariableType]

    @property
    def node_type(self) -> NodeType:  # pragma: no cover - overridden
        """Return the node's kind."""
        raise NotImplementedError

    @property
    def size(self) -> int:
        """Return the number of content bytes (always 0 for directories)."""
        return 0

    def to_info(self, path: str) -> NodeInfo:
        """Create a read-only snapshot of this node at *path*."""
        return NodeInfo(
            path=path,
            name=self.name,
            node_type=self.node_type,
            owner=self.owner,
            size=self.size,
            permissions={user: str(perms) for user, perms in self.permissions.items()},
        )


@dataclass(eq=False)
class File(Node):
    """A leaf node holding a resizable byte buffer."""

    content: bytearray = field(default_factory=bytearray)

    @property
    def node_type(self) -> NodeType:
        """Return ``NodeType.FILE``."""
        return NodeType.FILE

    @property
    def size(self) -> int:
        """Return the length of the file content in bytes."""
        return len(self.content)

    def overwrite(self, data: bytes) -> None:
        """Replace the whole content with *data*."""
        self.content[:] = data

    def append(self, data: bytes) -> None:
        """Add *data* to the end of the content."""
        self.content.extend(data)

    def read_into(self, buffer: bytearray | memoryview) -> int:
        """Copy as much content as fits into *buffer*.

        Bytes of *buffer* beyond the content length are left as they were.

        Returns:
            The number of bytes copied.

        """
        count = min(len(self.content), len(buffer))
        buffer[:count] = self.content[:count]
        return count


@dataclass(eq=False)
class Directory(Node):
    """An interior node owning a name-keyed set of children."""

    children: dict[str, Node] = field(default_factory=dict)  # pyright: ignore[reportUnknownVariableType]

    @property
    def node_type(self) -> NodeType:
        """Return ``NodeType.DIRECTORY``."""
        return NodeType.DIRECTORY

    def to_info(self, path: str) -> NodeInfo:
        """Create a snapshot that also reports how many children exist."""
        return replace(super().to_info(path), child_count=len(self.children))

    def get(self, name: str) -> Node | None:
        """Return the child called *name*, or None."""
        return self.children.get(name)

    def attach(self, child: Node) -> None:
        """Link *child* into this directory under its own name.

        Raises:
            KeyError: If the name is already taken.  The engine checks
                occupancy first, so this only guards against misuse.

        """
        if child.name in self.children:
            raise KeyError(child.name)
        self.children[child.name] = child

    def detach(self, name: str) -> Node:
        """Unlink and return the child called *name*."""
        return self.children.pop(name)

    def names(self) -> list[str]:
        """Return child names in lexicographic order."""
        return sorted(self.children)

    def walk(self, prefix: str = "") -> Iterator[str]:
        """Yield every descendant's relative path, depth first, pre-order.

        Siblings are visited in name order, so the listing is stable.
        """
        for name in self.names():
            child = self.children[name]
            rel = f"{prefix}{name}"
            yield rel
            if isinstance(child, Directory):
                yield from child.walk(f"{rel}/")


def copy_tree(node: Node, *, name: str, owner: str, superuser: str = ROOT_USER) -> Node:
    """Deep-copy *node* as a fresh creation by *owner*.

    File bytes are duplicated and directories rebuilt.  Ownership and
    permission tables are not carried over: every copied node belongs
    to *owner*, and only *owner* holds rights on it.

    The whole copy is built before the caller links it anywhere, so
    copying a directory into its own subtree still terminates.
    """
    if isinstance(node, File):
        return File(
            name=name,
            owner=owner,
            permissions=new_permission_table(owner, superuser=superuser),
            content=bytearray(node.content),
        )
    if not isinstance(node, Directory):
        msg = f"Cannot copy node of type {type(node).__name__}"
        raise TypeError(msg)
    clone = Directory(
        name=name,
        owner=owner,
        permissions=new_permission_table(owner, superuser=superuser),
    )
    for child_name, child in node.children.items():
        clone.children[child_name] = copy_tree(
            child, name=child_name, owner=owner, superuser=superuser
        )
    return clone
