"""Request values handed to the filesystem handlers.

The protocol layer decodes each incoming packet into a ``Request`` before
dispatching it to one of the handlers in ``memxfer.base.Handlers``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from .context import RequestContext


class Method(str, enum.Enum):
    """Operation names, spelled the way the request server sends them."""

    SETSTAT = "Setstat"
    RENAME = "Rename"
    RMDIR = "Rmdir"
    REMOVE = "Remove"
    MKDIR = "Mkdir"
    LINK = "Link"
    SYMLINK = "Symlink"
    LIST = "List"
    STAT = "Stat"
    READLINK = "Readlink"
    # Transfer methods, routed to file_read / file_write / open_file.
    GET = "Get"
    PUT = "Put"
    OPEN = "Open"


class AttrFlag(enum.IntFlag):
    """Which fields of an ``Attributes`` value were supplied."""

    NONE = 0
    SIZE = 0x1
    UIDGID = 0x2
    PERMISSIONS = 0x4
    ACMODTIME = 0x8


@dataclass
class Attributes:
    """File attributes carried by Setstat/Mkdir/Open requests.

    Only ``size`` is acted on; the remaining fields are accepted and
    ignored.

    Attributes:
        flags: Bit set of the fields that were actually sent.
        size: New file size (valid when ``AttrFlag.SIZE`` is set).
        uid: Owner id.
        gid: Group id.
        permissions: Permission bits.
        atime: Access time, seconds since the epoch.
        mtime: Modification time, seconds since the epoch.
    """

    flags: AttrFlag = AttrFlag.NONE
    size: int = 0
    uid: int = 0
    gid: int = 0
    permissions: int = 0
    atime: int = 0
    mtime: int = 0

    @classmethod
    def with_values(cls, **values: int) -> "Attributes":
        """Build attributes, setting the flag for every field given.

        Example:
            >>> Attributes.with_values(size=10).has_size
            True
        """
        flags = AttrFlag.NONE
        if "size" in values:
            flags |= AttrFlag.SIZE
        if "uid" in values or "gid" in values:
            flags |= AttrFlag.UIDGID
        if "permissions" in values:
            flags |= AttrFlag.PERMISSIONS
        if "atime" in values or "mtime" in values:
            flags |= AttrFlag.ACMODTIME
        return cls(flags=flags, **values)

    @property
    def has_size(self) -> bool:
        return bool(self.flags & AttrFlag.SIZE)


@dataclass
class Request:
    """A decoded request.

    Attributes:
        method: The operation to perform.
        filepath: Absolute path the operation acts on.
        target: Second path for Rename, Link and Symlink.
        attributes: Attributes sent with the request.
        context: Cancellation and deadline carrier for the request.
    """

    method: Method
    filepath: str
    target: str = ""
    attributes: Attributes = field(default_factory=Attributes)
    context: RequestContext = field(default_factory=RequestContext)

    def __post_init__(self) -> None:
        # Accept the wire spelling ("Rename") as well as the enum member.
        if not isinstance(self.method, Method):
            self.method = Method(self.method)
