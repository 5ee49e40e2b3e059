"""In-memory filesystem backend for the request server.

Entries live in a flat mapping from absolute path to ``FileNode``.
Directory membership is not stored anywhere: the children of ``P`` are the
keys whose ``posixpath.dirname`` is ``P``. Keys are used exactly as given by
the request; nothing here normalizes paths.
"""

from __future__ import annotations

import errno
import logging
import posixpath
import threading
from contextlib import contextmanager
from typing import Callable, Iterator

from .base import Handlers
from .config import MemFSConfig
from .context import request_scope
from .errors import (
    DirectoryNotEmptyError,
    HardLinkDirectoryError,
    InvalidOperationError,
    SymlinkLoopError,
    UnsupportedMethodError,
)
from .listing import NodeLister
from .node import FileNode
from .request import Method, Request

logger = logging.getLogger(__name__)

ROOT = "/"


class InMemoryFS:
    """Request handlers backed by an in-memory node store.

    Implements every handler slot of ``Handlers`` plus ``open_file`` and
    ``lstat``. One structural lock serializes all access to the path
    mapping, including the whole of a directory rename. File content is
    guarded separately by each node's own lock.

    Example:
        >>> fs = InMemoryFS()
        >>> fs.file_cmd(Request(Method.MKDIR, "/docs"))
        >>> fs.file_write(Request(Method.PUT, "/docs/a.txt")).write_at(b"hi", 0)
        2
        >>> fs.file_list(Request(Method.LIST, "/docs")).paths()
        ['/docs/a.txt']
    """

    def __init__(self, config: MemFSConfig | None = None):
        """Initialize an empty filesystem holding only the root directory.

        Args:
            config: Filesystem configuration. Defaults to ``MemFSConfig()``.
        """
        self.config = config if config is not None else MemFSConfig()
        self.root = FileNode(ROOT, is_dir=True)
        self.files: dict[str, FileNode | None] = {}
        self._lock = threading.Lock()
        self._injected_error: BaseException | None = None

        self._commands: dict[Method, Callable[[Request], None]] = {
            Method.SETSTAT: self._setstat,
            Method.RENAME: self._rename,
            Method.RMDIR: self._remove,
            Method.REMOVE: self._remove,
            Method.MKDIR: self._mkdir,
            Method.LINK: self._link,
            Method.SYMLINK: self._symlink,
        }

    # -------------------------------------------------------------------------
    # Error injection
    # -------------------------------------------------------------------------

    def return_error(self, err: BaseException | None) -> None:
        """Make every following handler call raise ``err``.

        Pass None to go back to normal operation.
        """
        self._injected_error = err

    @property
    def injected_error(self) -> BaseException | None:
        return self._injected_error

    @contextmanager
    def _serve(self, request: Request) -> Iterator[None]:
        """Common prologue of every handler: injected error, scope, lock."""
        err = self._injected_error
        if err is not None:
            raise err.with_traceback(None)
        with request_scope(request), self._lock:
            yield

    # -------------------------------------------------------------------------
    # Lookup (callers hold self._lock)
    # -------------------------------------------------------------------------

    def _lfetch(self, path: str) -> FileNode:
        """Look up ``path`` without following a terminal symlink."""
        if path == ROOT:
            return self.root

        node = self.files.get(path)
        if node is None:
            # A key mapped to None is stale; drop it.
            self.files.pop(path, None)
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        return node

    def _fetch(self, path: str) -> FileNode:
        """Look up ``path``, following symlinks to a non-symlink node."""
        node = self._lfetch(path)
        limit = self.config.max_symlink_hops
        hops = 0
        while node.is_symlink:
            if limit is not None and hops >= limit:
                raise SymlinkLoopError(path, hops)
            node = self._lfetch(node.symlink_target)
            hops += 1
        return node

    def _occupied(self, path: str) -> bool:
        return path == ROOT or self.files.get(path) is not None

    def _require_parent_dir(self, path: str) -> None:
        """Raise unless the parent of ``path`` resolves to a directory."""
        parent = self._fetch(posixpath.dirname(path))
        if not parent.is_dir:
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", parent.path)

    def _new_node(
        self, path: str, is_dir: bool = False, symlink_target: str = ""
    ) -> FileNode:
        return FileNode(
            path,
            is_dir=is_dir,
            symlink_target=symlink_target,
            write_delay=self.config.write_delay,
        )

    # -------------------------------------------------------------------------
    # Transfers
    # -------------------------------------------------------------------------

    def file_read(self, request: Request) -> FileNode:
        """Open ``request.filepath`` for reading.

        Raises:
            FileNotFoundError: If the path (or a symlink in its chain) is missing.
            InvalidOperationError: If it resolves to a directory.
        """
        with self._serve(request):
            node = self._fetch(request.filepath)
        return node.reader_at()

    def _get_file_for_write(self, request: Request) -> FileNode:
        with self._serve(request):
            path = request.filepath
            try:
                node = self._lfetch(path)
            except FileNotFoundError:
                # The parent lookup deliberately does not follow symlinks.
                parent = self._lfetch(posixpath.dirname(path))
                if not parent.is_dir:
                    raise InvalidOperationError(
                        "Parent is not a directory", parent.path
                    ) from None
                node = self._new_node(path)
                self.files[path] = node
                logger.debug("Created file %s", path)
                return node

            if node.is_symlink:
                node = self._fetch(path)
            return node

    def file_write(self, request: Request) -> FileNode:
        """Open ``request.filepath`` for writing, creating it if absent.

        Raises:
            FileNotFoundError: If the parent directory is missing.
            InvalidOperationError: If the parent is not a directory, or the
                path is a directory.
        """
        return self._get_file_for_write(request).writer_at()

    def open_file(self, request: Request) -> FileNode:
        """Open ``request.filepath`` for both reading and writing."""
        return self._get_file_for_write(request).writer_at()

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def file_list(self, request: Request) -> NodeLister:
        """Serve List, Stat and Readlink.

        List returns the direct children of a directory ordered by path.
        Stat and Readlink return the resolved node alone.

        Raises:
            FileNotFoundError: If the path does not resolve.
            NotADirectoryError: For List on anything but a directory.
            UnsupportedMethodError: For any other method.
        """
        with self._serve(request):
            node = self._fetch(request.filepath)

            if request.method is Method.LIST:
                if not node.is_dir:
                    raise NotADirectoryError(
                        errno.ENOTDIR, "Not a directory", request.filepath
                    )
                children = sorted(
                    path
                    for path, child in self.files.items()
                    if child is not None and posixpath.dirname(path) == node.path
                )
                return NodeLister([self.files[path] for path in children])

            if request.method in (Method.STAT, Method.READLINK):
                return NodeLister([node])

        raise UnsupportedMethodError(request.method, "file_list")

    def lstat(self, request: Request) -> NodeLister:
        """Stat ``request.filepath`` without following a terminal symlink."""
        with self._serve(request):
            return NodeLister([self._lfetch(request.filepath)])

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def file_cmd(self, request: Request) -> None:
        """Serve Setstat, Rename, Rmdir, Remove, Mkdir, Link and Symlink.

        Raises:
            UnsupportedMethodError: For any other method.
            OSError: Whatever the individual command raises.
        """
        with self._serve(request):
            command = self._commands.get(request.method)
            if command is None:
                raise UnsupportedMethodError(request.method, "file_cmd")
            command(request)

    def _setstat(self, request: Request) -> None:
        node = self._fetch(request.filepath)
        if request.attributes.has_size:
            node.truncate(request.attributes.size)

    def _rename(self, request: Request) -> None:
        src, dst = request.filepath, request.target
        if src == ROOT:
            raise PermissionError(errno.EPERM, "Cannot rename root directory", src)

        node = self._lfetch(src)
        if self._occupied(dst):
            raise FileExistsError(errno.EEXIST, "File exists", dst)
        if node.is_dir and dst.startswith(src + "/"):
            raise InvalidOperationError("Cannot move a directory into itself", dst)
        self._require_parent_dir(dst)

        moves = [(src, dst)]
        if node.is_dir:
            prefix = src + "/"
            moves += [
                (path, dst + path[len(src) :])
                for path, child in self.files.items()
                if child is not None and path.startswith(prefix)
            ]
        # Every destination key is checked before anything is moved.
        for _, new_path in moves[1:]:
            if self._occupied(new_path):
                raise FileExistsError(errno.EEXIST, "File exists", new_path)

        nodes = [self.files.pop(path) for path, _ in moves]
        for (_, new_path), moved in zip(moves, nodes):
            moved.path = new_path
            self.files[new_path] = moved

        logger.debug("Renamed %s -> %s", src, dst)

    def _remove(self, request: Request) -> None:
        path = request.filepath
        if path == ROOT:
            raise PermissionError(errno.EPERM, "Cannot remove root directory", path)

        parent = self._fetch(posixpath.dirname(path))
        if parent.is_dir:
            prefix = path + "/"
            for key, node in self.files.items():
                if node is not None and key.startswith(prefix):
                    raise DirectoryNotEmptyError(path)

        if self.files.pop(path, None) is not None:
            logger.debug("Removed %s", path)

    def _mkdir(self, request: Request) -> None:
        path = request.filepath
        self._require_parent_dir(path)
        if self._occupied(path):
            raise FileExistsError(errno.EEXIST, "File exists", path)

        self.files[path] = self._new_node(path, is_dir=True)
        logger.debug("Created directory %s", path)

    def _link(self, request: Request) -> None:
        node = self._fetch(request.filepath)
        if node.is_dir:
            raise HardLinkDirectoryError(request.filepath)
        if self._occupied(request.target):
            raise FileExistsError(errno.EEXIST, "File exists", request.target)
        self._require_parent_dir(request.target)

        self.files[request.target] = node
        logger.debug("Linked %s -> %s", request.target, request.filepath)

    def _symlink(self, request: Request) -> None:
        self._fetch(request.filepath)
        if self._occupied(request.target):
            raise FileExistsError(errno.EEXIST, "File exists", request.target)
        self._require_parent_dir(request.target)

        self.files[request.target] = self._new_node(
            request.target, symlink_target=request.filepath
        )
        logger.debug("Symlinked %s -> %s", request.target, request.filepath)


def in_memory_handlers(config: MemFSConfig | None = None) -> Handlers:
    """Return a ``Handlers`` bundle whose slots all share one ``InMemoryFS``.

    Args:
        config: Filesystem configuration (see ``configure``).

    Returns:
        Handlers ready to pass to a request server.
    """
    fs = InMemoryFS(config)
    return Handlers(file_get=fs, file_put=fs, file_cmd=fs, file_list=fs)
