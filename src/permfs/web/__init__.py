"""HTTP facade for the file system engine.

This package provides a Flask application that exposes the engine's
operations as JSON endpoints.  It is an **optional** extra — install
with::

    pip install permfs[web]

The ``create_app`` factory in ``app.py`` wraps one engine (a fresh one
unless supplied) and serves its operations under ``/api/``.
"""
