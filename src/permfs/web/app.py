"""Flask application factory for the permfs HTTP API.

The ``create_app`` function wraps a ``FileSystemEngine`` and returns a
Flask app exposing each operation as a JSON endpoint:

- ``GET /api/ls?path=&user=&recursive=`` — list a directory.
- ``GET /api/read?path=&user=`` — read a file (base64 ``data``).
- ``GET /api/stat?path=`` — node metadata.
- ``POST /api/mkdir`` / ``/api/touch`` — ``{"path", "user"}``.
- ``POST /api/chmod`` — ``{"path", "user", "target_user", "permissions"}``.
- ``POST /api/rm`` — ``{"path", "user", "recursive"?}``.
- ``POST /api/write`` — ``{"path", "user", "data" (base64), "append"?}``.
- ``POST /api/mv`` — ``{"source", "dest", "user"}``.
- ``POST /api/cp`` — ``{"source", "dest", "user", "recursive"?}``.

Engine errors become JSON ``{"error": ..., "type": ...}`` responses
with a status code matching the failure.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import asdict
from typing import Any

from flask import Flask, Response, jsonify, request

from permfs.engine import FileSystemEngine
from permfs.errors import (
    FileSystemError,
    InvalidOperationError,
    InvalidPathError,
    InvalidPermissionSpecError,
    PathAlreadyExistsError,
    PathNotFoundError,
    PermissionError,  # noqa: A004
)

_HTTP_BAD_REQUEST = 400
_HTTP_FORBIDDEN = 403
_HTTP_NOT_FOUND = 404
_HTTP_CONFLICT = 409

_STATUS_BY_ERROR: list[tuple[type[FileSystemError], int]] = [
    (PathNotFoundError, _HTTP_NOT_FOUND),
    (PathAlreadyExistsError, _HTTP_CONFLICT),
    (PermissionError, _HTTP_FORBIDDEN),
    (InvalidOperationError, _HTTP_BAD_REQUEST),
    (InvalidPathError, _HTTP_BAD_REQUEST),
    (InvalidPermissionSpecError, _HTTP_BAD_REQUEST),
]

_TRUTHY = {"1", "true", "yes", "on"}


def status_for(error: FileSystemError) -> int:
    """Return the HTTP status code that reports *error*."""
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return _HTTP_BAD_REQUEST


def _flag(value: Any) -> bool:
    """Interpret a JSON or query-string value as a boolean."""
    if isinstance(value, bool):
        return value
    return str(value).lower() in _TRUTHY


def _missing(data: dict[str, Any] | None, *fields: str) -> tuple[Response, int] | None:
    """Return a 400 response if *data* lacks any of *fields*."""
    if data is None:
        return jsonify({"error": "Expected a JSON body"}), _HTTP_BAD_REQUEST
    absent = [f for f in fields if f not in data]
    if absent:
        return jsonify({"error": f"Missing field(s): {', '.join(absent)}"}), _HTTP_BAD_REQUEST
    return None


def create_app(engine: FileSystemEngine | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        engine: The engine to serve; a fresh one is created when omitted.

    Returns:
        A configured Flask application ready to serve.

    """
    fs = engine if engine is not None else FileSystemEngine()

    app = Flask(__name__)
    app.extensions["permfs"] = fs

    @app.errorhandler(FileSystemError)
    def handle_fs_error(error: FileSystemError) -> tuple[Response, int]:  # pyright: ignore[reportUnusedFunction]
        """Translate an engine error into a JSON response."""
        body = {"error": str(error), "type": type(error).__name__, "path": error.path}
        return jsonify(body), status_for(error)

    @app.route("/api/ls")
    def ls() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """List a directory."""
        missing = _missing(dict(request.args), "user")
        if missing is not None:
            return missing
        path = request.args.get("path", "/")
        recursive = _flag(request.args.get("recursive", "false"))
        return jsonify({"path": path, "entries": fs.ls(path, request.args["user"], recursive)})

    @app.route("/api/read")
    def read() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Return a file's content, base64-encoded."""
        missing = _missing(dict(request.args), "path", "user")
        if missing is not None:
            return missing
        content = fs.read_bytes(request.args["path"], request.args["user"])
        return jsonify(
            {"data": base64.b64encode(content).decode("ascii"), "size": len(content)}
        )

    @app.route("/api/stat")
    def stat() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Return node metadata."""
        missing = _missing(dict(request.args), "path")
        if missing is not None:
            return missing
        return jsonify(asdict(fs.stat(request.args["path"])))

    @app.route("/api/mkdir", methods=["POST"])
    def mkdir() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Create a directory."""
        data = request.get_json(silent=True)
        missing = _missing(data, "path", "user")
        if missing is not None:
            return missing
        fs.mkdir(data["path"], data["user"])
        return jsonify({"ok": True})

    @app.route("/api/touch", methods=["POST"])
    def touch() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Create an empty file."""
        data = request.get_json(silent=True)
        missing = _missing(data, "path", "user")
        if missing is not None:
            return missing
        fs.touch(data["path"], data["user"])
        return jsonify({"ok": True})

    @app.route("/api/chmod", methods=["POST"])
    def chmod() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Set a user's rights on a node."""
        data = request.get_json(silent=True)
        missing = _missing(data, "path", "user", "target_user", "permissions")
        if missing is not None:
            return missing
        fs.chmod(data["path"], data["user"], data["target_user"], data["permissions"])
        return jsonify({"ok": True})

    @app.route("/api/rm", methods=["POST"])
    def rm() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Remove a node."""
        data = request.get_json(silent=True)
        missing = _missing(data, "path", "user")
        if missing is not None:
            return missing
        fs.rm(data["path"], data["user"], _flag(data.get("recursive", False)))
        return jsonify({"ok": True})

    @app.route("/api/write", methods=["POST"])
    def write() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Write base64-encoded data to a file."""
        data = request.get_json(silent=True)
        missing = _missing(data, "path", "user", "data")
        if missing is not None:
            return missing
        try:
            payload = base64.b64decode(data["data"], validate=True)
        except (binascii.Error, TypeError):
            return jsonify({"error": "Field 'data' must be base64"}), _HTTP_BAD_REQUEST
        fs.write(data["path"], data["user"], _flag(data.get("append", False)), payload)
        return jsonify({"ok": True, "size": len(payload)})

    @app.route("/api/mv", methods=["POST"])
    def mv() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Move a node."""
        data = request.get_json(silent=True)
        missing = _missing(data, "source", "dest", "user")
        if missing is not None:
            return missing
        fs.mv(data["source"], data["dest"], data["user"])
        return jsonify({"ok": True})

    @app.route("/api/cp", methods=["POST"])
    def cp() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Copy a node."""
        data = request.get_json(silent=True)
        missing = _missing(data, "source", "dest", "user")
        if missing is not None:
            return missing
        fs.cp(data["source"], data["dest"], data["user"], _flag(data.get("recursive", False)))
        return jsonify({"ok": True})

    return app


def main() -> None:
    """Run the HTTP API development server.

    This is the ``permfs-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
