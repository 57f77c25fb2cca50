"""User accounts used to seed the tree.

The engine does not authenticate anyone: an identity is just a string,
and it is judged purely by the permission tables on the nodes it
touches.  The registry exists to describe the *initial* users, much
like ``/etc/passwd``: each account names a home directory that the
engine creates (and hands to that user) when it is built.

**UserAccount** — a username, a home path, and the permission string
    recorded for the user on that home.

**UserRegistry** — an ordered collection of accounts with unique names.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TypeAlias

from permfs.permissions import PermissionSet

SeedEntry: TypeAlias = "UserAccount | tuple[str, str] | tuple[str, str, str]"


@dataclass(frozen=True)
class UserAccount:
    """An identity known at construction time."""

    name: str
    home: str
    permissions: str = "rwx"

    def __post_init__(self) -> None:
        """Reject empty names and malformed permission strings early."""
        if not self.name:
            msg = "User name must not be empty"
            raise ValueError(msg)
        PermissionSet.parse(self.permissions)

    @property
    def permission_set(self) -> PermissionSet:
        """Return the parsed permission string."""
        return PermissionSet.parse(self.permissions)

    @classmethod
    def coerce(cls, entry: SeedEntry) -> UserAccount:
        """Accept an account or a ``(name, home[, permissions])`` tuple.

        Raises:
            ValueError: If a tuple has the wrong number of fields.

        """
        if isinstance(entry, UserAccount):
            return entry
        match entry:
            case (name, home):
                return cls(name=name, home=home)
            case (name, home, permissions):
                return cls(name=name, home=home, permissions=permissions)
            case _:
                msg = f"Cannot build a user account from {entry!r}"
                raise ValueError(msg)


class UserRegistry:
    """Ordered registry of seed accounts with unique names."""

    def __init__(self, accounts: Iterable[SeedEntry] = ()) -> None:
        """Create a registry, adding each of *accounts* in order."""
        self._accounts: dict[str, UserAccount] = {}
        for entry in accounts:
            self.add(entry)

    def add(self, entry: SeedEntry) -> UserAccount:
        """Register an account.

        Returns:
            The stored account.

        Raises:
            ValueError: If the name is already registered.

        """
        account = UserAccount.coerce(entry)
        if account.name in self._accounts:
            msg = f"User '{account.name}' already exists"
            raise ValueError(msg)
        self._accounts[account.name] = account
        return account

    def get(self, name: str) -> UserAccount | None:
        """Look up an account by name, or return None."""
        return self._accounts.get(name)

    def list_users(self) -> list[UserAccount]:
        """Return all accounts in registration order."""
        return list(self._accounts.values())

    def __contains__(self, name: object) -> bool:
        """Return whether *name* is registered."""
        return name in self._accounts

    def __iter__(self) -> Iterator[UserAccount]:
        """Iterate over accounts in registration order."""
        return iter(self._accounts.values())

    def __len__(self) -> int:
        """Return the number of registered accounts."""
        return len(self._accounts)

