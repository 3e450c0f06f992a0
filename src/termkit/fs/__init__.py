"""Virtual file system subsystem — node table, listings, and path resolution.

Re-exports public symbols so callers can write::

    from termkit.fs import FileSystem, resolve_path
"""

from termkit.fs.filesystem import (
    ROOT_PATH,
    DirEntry,
    FileSystem,
    FileType,
    NodeInfo,
    resolve_path,
    split_path,
)

__all__ = [
    "ROOT_PATH",
    "DirEntry",
    "FileSystem",
    "FileType",
    "NodeInfo",
    "resolve_path",
    "split_path",
]
