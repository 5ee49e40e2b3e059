"""Exceptions raised by the in-memory filesystem.

Missing paths, occupied targets and non-directories use the builtin
``FileNotFoundError``, ``FileExistsError`` and ``NotADirectoryError``. The
classes here cover the remaining failure kinds. Each is an ``OSError``
subclass carrying a matching errno, so protocol layers can map any of them
to a status code from ``exc.errno`` alone.
"""

import errno


class InvalidOperationError(OSError):
    """Operation attempted on the wrong kind of node.

    Raised when reading or writing a directory, or when the parent of a new
    file is not a directory.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(errno.EINVAL, message, path)


class DirectoryNotEmptyError(OSError):
    """Delete attempted on a directory that still has entries."""

    def __init__(self, path: str) -> None:
        super().__init__(errno.ENOTEMPTY, "Directory not empty", path)


class HardLinkDirectoryError(IsADirectoryError):
    """Hard link requested for a directory."""

    def __init__(self, path: str) -> None:
        super().__init__(errno.EPERM, "hard link not allowed for directory", path)


class SymlinkLoopError(OSError):
    """Symlink chain longer than the configured hop limit."""

    def __init__(self, path: str, hops: int) -> None:
        super().__init__(
            errno.ELOOP, f"Too many levels of symbolic links ({hops})", path
        )


class UnsupportedMethodError(OSError):
    """Handler called with a method it does not serve."""

    def __init__(self, method: object, handler: str) -> None:
        name = getattr(method, "value", method)
        super().__init__(
            errno.EOPNOTSUPP, f"{handler} does not support method {name}"
        )
