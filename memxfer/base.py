"""Handler interfaces and metadata dataclasses.

Defines the backend contract the request server dispatches to, and the
``FileStat`` snapshot returned for a node.
"""

from __future__ import annotations

import stat as stat_mod
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .listing import NodeLister
    from .node import FileNode
    from .request import Request


@dataclass
class FileStat:
    """Point-in-time metadata for a single node.

    Attributes:
        name: Final path segment.
        path: Full path the node had when the snapshot was taken.
        size: Content length in bytes (0 for directories and symlinks).
        mode: ``st_mode`` value including the file type bits.
        modified_at: Modification time (UTC), fixed at node creation.
        symlink_target: Path the node points to, empty unless a symlink.
    """

    name: str
    path: str
    size: int
    mode: int
    modified_at: datetime
    symlink_target: str = ""

    @property
    def is_dir(self) -> bool:
        return stat_mod.S_ISDIR(self.mode)

    @property
    def is_symlink(self) -> bool:
        return stat_mod.S_ISLNK(self.mode)

    # os.stat_result-compatible properties

    @property
    def st_size(self) -> int:
        return self.size

    @property
    def st_mode(self) -> int:
        return self.mode

    @property
    def st_mtime(self) -> float:
        return self.modified_at.timestamp()


@runtime_checkable
class FileReader(Protocol):
    """Serves Get requests."""

    def file_read(self, request: Request) -> FileNode:
        """Return a view supporting ``read_at`` / ``readinto_at``."""
        ...


@runtime_checkable
class FileWriter(Protocol):
    """Serves Put requests."""

    def file_write(self, request: Request) -> FileNode:
        """Return a view supporting ``write_at``."""
        ...


@runtime_checkable
class OpenFileWriter(FileWriter, Protocol):
    """Optional: serves Open requests needing read and write on one view."""

    def open_file(self, request: Request) -> FileNode:
        ...


@runtime_checkable
class FileCmder(Protocol):
    """Serves Setstat, Rename, Rmdir, Remove, Mkdir, Link and Symlink."""

    def file_cmd(self, request: Request) -> None:
        ...


@runtime_checkable
class FileLister(Protocol):
    """Serves List, Stat and Readlink."""

    def file_list(self, request: Request) -> NodeLister:
        ...


@runtime_checkable
class LstatFileLister(FileLister, Protocol):
    """Optional: serves Lstat without following a terminal symlink."""

    def lstat(self, request: Request) -> NodeLister:
        ...


@runtime_checkable
class TransferErrorHandler(Protocol):
    """Optional on read/write views: told how a transfer ended."""

    def transfer_error(self, err: BaseException) -> None:
        ...


@dataclass
class Handlers:
    """The four handler slots a request server dispatches to.

    Attributes:
        file_get: Handler for reads.
        file_put: Handler for writes.
        file_cmd: Handler for commands.
        file_list: Handler for listings and stats.
    """

    file_get: FileReader
    file_put: FileWriter
    file_cmd: FileCmder
    file_list: FileLister
