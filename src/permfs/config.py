"""Engine configuration.

A ``FileSystemConfig`` bundles the settings an engine is built from:
the seed users, the name of the superuser identity, and the minimum
level the audit log keeps.  It can be written in code or loaded from a
JSON document::

    {
      "superuser": "root",
      "log_level": "INFO",
      "users": [
        {"name": "alice", "home": "/home/alice", "permissions": "rwx"},
        {"name": "bob", "home": "/home/bob"}
      ]
    }

Every key is optional.  Configuration only affects construction; the
tree itself is never written back to disk.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from permfs.logging import LogLevel
from permfs.permissions import ROOT_USER
from permfs.users import UserAccount


@dataclass(frozen=True)
class FileSystemConfig:
    """Settings used when building a ``FileSystemEngine``."""

    users: tuple[UserAccount, ...] = ()
    superuser: str = ROOT_USER
    log_level: LogLevel = LogLevel.INFO

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileSystemConfig:
        """Build a config from a parsed JSON object.

        Raises:
            ValueError: If a user entry is malformed or the log level
                is unknown.

        """
        users: list[UserAccount] = []
        for raw in data.get("users", []):
            if not isinstance(raw, dict) or "name" not in raw or "home" not in raw:
                msg = f"User entry needs 'name' and 'home': {raw!r}"
                raise ValueError(msg)
            users.append(
                UserAccount(
                    name=raw["name"],
                    home=raw["home"],
                    permissions=raw.get("permissions", "rwx"),
                )
            )
        level = data.get("log_level", LogLevel.INFO.name)
        return cls(
            users=tuple(users),
            superuser=data.get("superuser", ROOT_USER),
            log_level=level if isinstance(level, LogLevel) else LogLevel.from_name(level),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the same shape ``from_dict`` reads."""
        return {
            "superuser": self.superuser,
            "log_level": self.log_level.name,
            "users": [
                {"name": u.name, "home": u.home, "permissions": u.permissions}
                for u in self.users
            ],
        }


def load_config(path: Path) -> FileSystemConfig:
    """Load a configuration from a JSON file.

    Raises:
        FileNotFoundError: If the path does not exist.
        ValueError: If the document is not valid JSON or not a valid config.

    """
    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        msg = f"Config root must be a JSON object: {path}"
        raise ValueError(msg)
    return FileSystemConfig.from_dict(data)
