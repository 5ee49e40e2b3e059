"""A single in-memory file, directory or symlink."""

from __future__ import annotations

import logging
import posixpath
import stat as stat_mod
import threading
import time
from datetime import datetime, timezone

from .base import FileStat
from .errors import InvalidOperationError

logger = logging.getLogger(__name__)


class FileNode:
    """One entry of an ``InMemoryFS``.

    Acts as its own read/write view: the request server calls ``read_at``
    and ``write_at`` on the object returned by the handlers. Content is
    guarded by a per-node lock, so transfers to different nodes never
    contend with each other or with the filesystem's structural lock.

    Kind (``is_dir`` / ``symlink_target``) and ``mod_time`` are fixed at
    construction. Only ``path`` changes, on rename.

    Example:
        >>> node = FileNode("/notes.txt", write_delay=0)
        >>> node.write_at(b"hello", 0)
        5
        >>> node.read_at(3, 1)
        b'ell'
    """

    def __init__(
        self,
        path: str,
        is_dir: bool = False,
        symlink_target: str = "",
        write_delay: float = 0.0,
    ):
        """Create a node.

        Args:
            path: Full path of the node.
            is_dir: True for a directory.
            symlink_target: Path a symlink points to; empty for other kinds.
            write_delay: Seconds slept per byte in ``write_at``.
        """
        self.path = path
        self._is_dir = is_dir
        self._symlink_target = symlink_target
        self._mod_time = datetime.now(timezone.utc)
        self._write_delay = write_delay
        self._transfer_error: BaseException | None = None

        self._lock = threading.Lock()
        self._content = bytearray()

    def __repr__(self) -> str:
        return f"FileNode({self.path!r}, mode={stat_mod.filemode(self.mode)})"

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        """Final segment of the node's path."""
        return posixpath.basename(self.path) or self.path

    @property
    def is_dir(self) -> bool:
        return self._is_dir

    @property
    def is_symlink(self) -> bool:
        return self._symlink_target != ""

    @property
    def symlink_target(self) -> str:
        return self._symlink_target

    @property
    def mod_time(self) -> datetime:
        """Creation time; writes do not update it."""
        return self._mod_time

    @property
    def mode(self) -> int:
        if self._is_dir:
            return stat_mod.S_IFDIR | 0o755
        if self._symlink_target:
            return stat_mod.S_IFLNK | 0o777
        return stat_mod.S_IFREG | 0o644

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._content)

    def stat(self) -> FileStat:
        """Snapshot of the node's metadata."""
        return FileStat(
            name=self.name,
            path=self.path,
            size=self.size,
            mode=self.mode,
            modified_at=self._mod_time,
            symlink_target=self._symlink_target,
        )

    # -------------------------------------------------------------------------
    # Read / write views
    # -------------------------------------------------------------------------

    def _check_has_content(self, action: str) -> None:
        if self._is_dir:
            raise InvalidOperationError(f"Cannot {action} a directory", self.path)
        if self._symlink_target:
            raise InvalidOperationError(f"Cannot {action} a symlink", self.path)

    def reader_at(self) -> "FileNode":
        """Return this node as a read view.

        Raises:
            InvalidOperationError: If the node is a directory.
        """
        if self._is_dir:
            raise InvalidOperationError("Is a directory", self.path)
        return self

    def writer_at(self) -> "FileNode":
        """Return this node as a write view.

        Raises:
            InvalidOperationError: If the node is a directory.
        """
        if self._is_dir:
            raise InvalidOperationError("Is a directory", self.path)
        return self

    def read_at(self, size: int, offset: int) -> bytes:
        """Read up to ``size`` bytes starting at ``offset``.

        Follows ``os.pread``: a result shorter than ``size`` means the end
        of the content was reached, and ``b""`` means ``offset`` is at or
        past the end.

        Raises:
            ValueError: If ``offset`` or ``size`` is negative.
        """
        if offset < 0:
            raise ValueError(f"FileNode.read_at: negative offset {offset}")
        if size < 0:
            raise ValueError(f"FileNode.read_at: negative size {size}")
        with self._lock:
            return bytes(self._content[offset : offset + size])

    def readinto_at(self, buffer: bytearray | memoryview, offset: int) -> int:
        """Fill ``buffer`` from ``offset``; return the number of bytes copied.

        0 means end of stream; fewer than ``len(buffer)`` means a short read
        that hit the end.

        Raises:
            ValueError: If ``offset`` is negative.
        """
        if offset < 0:
            raise ValueError(f"FileNode.readinto_at: negative offset {offset}")
        with self._lock:
            if offset >= len(self._content):
                return 0
            chunk = self._content[offset : offset + len(buffer)]
            n = len(chunk)
            buffer[:n] = chunk
            return n

    def write_at(self, data: bytes, offset: int) -> int:
        """Write ``data`` at ``offset``, growing the content as needed.

        A gap between the current end and ``offset`` is zero-filled. The
        content never shrinks on write.

        Returns:
            Number of bytes written.

        Raises:
            ValueError: If ``offset`` is negative.
        """
        if offset < 0:
            raise ValueError(f"FileNode.write_at: negative offset {offset}")

        # Simulated transfer time, taken before the content lock so that
        # other transfers on this node are not held up by the sleep.
        if self._write_delay:
            time.sleep(self._write_delay * len(data))

        with self._lock:
            end = offset + len(data)
            grow = end - len(self._content)
            if grow > 0:
                self._content.extend(bytes(grow))
            self._content[offset:end] = data
            return len(data)

    def truncate(self, size: int) -> None:
        """Shrink or zero-extend the content to exactly ``size`` bytes.

        Raises:
            ValueError: If ``size`` is negative.
            InvalidOperationError: If the node is a directory or symlink.
        """
        if size < 0:
            raise ValueError(f"FileNode.truncate: negative size {size}")
        self._check_has_content("truncate")
        with self._lock:
            grow = size - len(self._content)
            if grow <= 0:
                del self._content[size:]
            else:
                self._content.extend(bytes(grow))

    # -------------------------------------------------------------------------
    # Transfer outcome
    # -------------------------------------------------------------------------

    def transfer_error(self, err: BaseException) -> None:
        """Record the error a finished transfer over this node ended with."""
        logger.warning("Transfer on %s ended with error: %r", self.path, err)
        self._transfer_error = err

    @property
    def last_transfer_error(self) -> BaseException | None:
        return self._transfer_error
