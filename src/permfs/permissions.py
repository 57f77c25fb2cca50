"""Permission sets and the access-control policy.

Every node carries a *permission table*: a dict mapping an identity to
the ``PermissionSet`` that identity holds on the node.  The policy is
deliberately simpler than Unix:

- The **superuser** (``root``) is always allowed.  It is never stored
  in a table.
- The node's **owner** is always allowed, whatever its table entry says.
- Anyone else needs an explicit entry containing the required right.

Which node gets checked depends on the operation.  Structural changes
(create, delete, rename) are checked against the *parent* directory,
because they change the parent's child set.  Content access (read and
write of file bytes) is checked against the file itself.

Permission strings use the familiar letters ``r``, ``w`` and ``x`` in
any order.  ``-`` is accepted as a placeholder so ``"r-x"`` reads
naturally, and ``""`` means no rights at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from permfs.errors import InvalidPermissionSpecError, PermissionError

if TYPE_CHECKING:
    from permfs.nodes import Node

ROOT_USER = "root"


class Right(StrEnum):
    """A single access right, valued by its permission-string letter."""

    READ = "r"
    WRITE = "w"
    EXECUTE = "x"


@dataclass(frozen=True)
class PermissionSet:
    """The rights one identity holds on one node.

    Frozen so tables can hand out entries without callers mutating
    them in place; ``chmod`` replaces an entry instead.
    """

    read: bool = False
    write: bool = False
    execute: bool = False

    @classmethod
    def full(cls) -> PermissionSet:
        """Return the set granting every right (``rwx``)."""
        return cls(read=True, write=True, execute=True)

    @classmethod
    def parse(cls, spec: str) -> PermissionSet:
        """Build a set from a permission string such as ``"rw"`` or ``"r-x"``.

        The string describes the exact set; it is not applied on top of
        an existing one.

        Raises:
            InvalidPermissionSpecError: If *spec* contains anything other
                than ``r``, ``w``, ``x`` or ``-``.

        """
        letters = set(spec)
        unknown = letters - {"r", "w", "x", "-"}
        if unknown:
            msg = f"Invalid permission string {spec!r}: unknown {''.join(sorted(unknown))!r}"
            raise InvalidPermissionSpecError(msg)
        return cls(read="r" in letters, write="w" in letters, execute="x" in letters)

    def allows(self, right: Right) -> bool:
        """Return whether this set contains *right*."""
        match right:
            case Right.READ:
                return self.read
            case Right.WRITE:
                return self.write
            case Right.EXECUTE:
                return self.execute

    def to_spec(self) -> str:
        """Render as the compact letter form, e.g. ``"rx"`` (empty for none)."""
        return "".join(r.value for r in Right if self.allows(r))

    def __str__(self) -> str:
        """Render in the fixed-width ``ls -l`` style, e.g. ``r-x``."""
        return "".join(r.value if self.allows(r) else "-" for r in Right)


def is_permitted(node: Node, user: str, right: Right, *, superuser: str = ROOT_USER) -> bool:
    """Decide whether *user* holds *right* on *node*.

    The superuser and the node's owner always pass.  Everyone else
    must have an entry in the node's table that includes the right.
    """
    if user in (superuser, node.owner):
        return True
    granted = node.permissions.get(user)
    return granted is not None and granted.allows(right)


def check_permission(
    node: Node,
    user: str,
    right: Right,
    *,
    path: str,
    superuser: str = ROOT_USER,
) -> None:
    """Raise if *user* lacks *right* on *node*.

    Args:
        node: The node whose table is consulted (a parent directory for
            structural operations, the file itself for content access).
        user: The acting identity.
        right: The right the operation needs.
        path: The path of *node*, used in the error message.
        superuser: The identity that bypasses every check.

    Raises:
        PermissionError: If access is denied.

    """
    if not is_permitted(node, user, right, superuser=superuser):
        msg = f"Permission denied: {user!r} lacks {right.name.lower()} on {path}"
        raise PermissionError(msg, path=path, user=user, right=right.value)


def check_owner(node: Node, user: str, *, path: str, superuser: str = ROOT_USER) -> None:
    """Raise unless *user* is the owner of *node* or the superuser.

    Used by ``chmod``: holding write on a node is not enough to change
    who may access it.

    Raises:
        PermissionError: If *user* is neither owner nor superuser.

    """
    if user not in (superuser, node.owner):
        msg = f"Permission denied: only the owner of {path} may change its permissions"
        raise PermissionError(msg, path=path, user=user)
