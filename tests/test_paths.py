"""Tests for path parsing and resolution.

Paths are absolute and slash-separated.  Resolution walks the tree from
the root; parent-mode resolution stops one segment short so callers can
create or remove the final name.
"""

import pytest

from permfs.errors import InvalidOperationError, InvalidPathError, PathNotFoundError
from permfs.nodes import Directory, File
from permfs.paths import is_within, join_path, resolve, resolve_parent, split_path


def _sample_tree() -> Directory:
    """Build ``/docs/readme.txt`` and ``/docs/notes/`` under a root."""
    root = Directory(name="/", owner="root")
    docs = Directory(name="docs", owner="root")
    docs.attach(File(name="readme.txt", owner="root"))
    docs.attach(Directory(name="notes", owner="root"))
    root.attach(docs)
    return root


class TestSplitPath:
    """Verify syntax checking and segment splitting."""

    def test_root_has_no_segments(self) -> None:
        """``/`` splits into an empty list."""
        assert split_path("/") == []

    def test_nested_path(self) -> None:
        """Each name between separators becomes a segment."""
        assert split_path("/docs/readme.txt") == ["docs", "readme.txt"]

    def test_single_trailing_separator_is_tolerated(self) -> None:
        """``/docs/`` is the same as ``/docs``."""
        assert split_path("/docs/") == ["docs"]

    def test_relative_path_rejected(self) -> None:
        """Paths must start with the separator."""
        with pytest.raises(InvalidPathError, match="absolute"):
            split_path("docs/readme.txt")

    def test_empty_string_rejected(self) -> None:
        """The empty string is not a path."""
        with pytest.raises(InvalidPathError):
            split_path("")

    def test_double_separator_rejected(self) -> None:
        """Empty segments are not allowed."""
        with pytest.raises(InvalidPathError, match="Empty"):
            split_path("/docs//readme.txt")

    @pytest.mark.parametrize("path", ["/docs/./readme.txt", "/docs/../etc", "/.."])
    def test_dot_segments_rejected(self, path: str) -> None:
        """``.`` and ``..`` are not interpreted."""
        with pytest.raises(InvalidPathError, match="Relative"):
            split_path(path)

    def test_join_is_inverse_of_split(self) -> None:
        """Joining the segments of a normal path gives the path back."""
        assert join_path(split_path("/a/b/c")) == "/a/b/c"
        assert join_path([]) == "/"


class TestResolve:
    """Verify direct resolution."""

    def test_resolve_root(self) -> None:
        """Resolving ``/`` returns the root with an empty chain."""
        root = _sample_tree()
        result = resolve(root, "/")
        assert result.node is root
        assert result.chain == []

    def test_resolve_nested_file(self) -> None:
        """The chain lists every directory walked through."""
        root = _sample_tree()
        result = resolve(root, "/docs/readme.txt")
        assert isinstance(result.node, File)
        assert result.node.name == "readme.txt"
        assert [d.name for d in result.chain] == ["/", "docs"]

    def test_missing_segment_is_reported(self) -> None:
        """The error names the first segment that does not exist."""
        root = _sample_tree()
        with pytest.raises(PathNotFoundError) as excinfo:
            resolve(root, "/docs/missing/deeper")
        assert excinfo.value.path == "/docs/missing"

    def test_cannot_walk_through_a_file(self) -> None:
        """A File in the middle of a path makes it unresolvable."""
        root = _sample_tree()
        with pytest.raises(PathNotFoundError, match="Not a directory"):
            resolve(root, "/docs/readme.txt/inner")


class TestResolveParent:
    """Verify parent-mode resolution."""

    def test_returns_parent_and_name(self) -> None:
        """The final segment need not exist."""
        root = _sample_tree()
        result = resolve_parent(root, "/docs/new.txt")
        assert result.parent.name == "docs"
        assert result.name == "new.txt"
        assert result.parent_path == "/docs"
        assert result.existing is None

    def test_existing_child_is_reported(self) -> None:
        """``existing`` returns the node already using the name."""
        root = _sample_tree()
        result = resolve_parent(root, "/docs/readme.txt")
        assert isinstance(result.existing, File)

    def test_top_level_parent_is_root(self) -> None:
        """A single-segment path has the root as parent."""
        root = _sample_tree()
        result = resolve_parent(root, "/top")
        assert result.parent is root
        assert result.parent_path == "/"

    def test_missing_parent_raises(self) -> None:
        """The parent itself must exist."""
        root = _sample_tree()
        with pytest.raises(PathNotFoundError):
            resolve_parent(root, "/nope/child")

    def test_file_parent_raises(self) -> None:
        """A File cannot act as a parent."""
        root = _sample_tree()
        with pytest.raises(PathNotFoundError, match="Not a directory"):
            resolve_parent(root, "/docs/readme.txt/child")

    def test_root_has_no_parent(self) -> None:
        """Parent mode on ``/`` is an invalid operation."""
        root = _sample_tree()
        with pytest.raises(InvalidOperationError):
            resolve_parent(root, "/")


class TestIsWithin:
    """Verify subtree membership by segments."""

    def test_descendant(self) -> None:
        """A longer path with the same prefix is inside."""
        assert is_within(["a", "b", "c"], ["a", "b"])

    def test_same_path(self) -> None:
        """A path is within itself."""
        assert is_within(["a"], ["a"])

    def test_sibling_with_common_prefix_text(self) -> None:
        """Segment comparison, not string prefix: ``/ab`` is not in ``/a``."""
        assert not is_within(["ab"], ["a"])
