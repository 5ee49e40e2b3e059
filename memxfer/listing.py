"""Offset-addressable listing results."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Iterator

from .node import FileNode


class NodeLister(Sequence):
    """Immutable sequence of nodes returned by list, stat and lstat.

    The request server pages through a directory with ``list_at``; a page
    shorter than requested marks the end of the listing.
    """

    def __init__(self, nodes: list[FileNode]):
        self._nodes = tuple(nodes)

    def list_at(self, offset: int, count: int) -> list[FileNode]:
        """Return up to ``count`` nodes starting at ``offset``.

        Raises:
            ValueError: If ``offset`` or ``count`` is negative.
        """
        if offset < 0 or count < 0:
            raise ValueError("offset and count must be non-negative")
        return list(self._nodes[offset : offset + count])

    def paths(self) -> list[str]:
        return [node.path for node in self._nodes]

    def __getitem__(self, index):
        return self._nodes[index]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[FileNode]:
        return iter(self._nodes)

    def __repr__(self) -> str:
        return f"NodeLister({self.paths()!r})"
