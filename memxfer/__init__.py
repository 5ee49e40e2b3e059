"""memxfer: In-memory filesystem backend for file-transfer request servers."""

from .base import FileStat, Handlers
from .config import MemFSConfig, configure
from .context import RequestContext, current_request, request_scope
from .errors import (
    DirectoryNotEmptyError,
    HardLinkDirectoryError,
    InvalidOperationError,
    SymlinkLoopError,
    UnsupportedMethodError,
)
from .listing import NodeLister
from .memory import InMemoryFS, in_memory_handlers
from .node import FileNode
from .request import AttrFlag, Attributes, Method, Request

__all__ = [
    "AttrFlag",
    "Attributes",
    "configure",
    "current_request",
    "DirectoryNotEmptyError",
    "FileNode",
    "FileStat",
    "Handlers",
    "HardLinkDirectoryError",
    "in_memory_handlers",
    "InMemoryFS",
    "InvalidOperationError",
    "MemFSConfig",
    "Method",
    "NodeLister",
    "Request",
    "RequestContext",
    "request_scope",
    "SymlinkLoopError",
    "UnsupportedMethodError",
]
