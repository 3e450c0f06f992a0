"""In-memory virtual file system with a node table and path resolution.

The tree is stored as an **arena**: every file or directory is a
``_Node`` record in a single ``dict[int, _Node]`` keyed by node id.

- **Directories** map child names to node ids (``children``).  Python
  dicts keep insertion order, so listings are deterministic without
  sorting.
- **Parent links** are plain node ids, never object references.  The
  ownership graph stays a tree, and ``to_dict()`` can dump the table
  as-is.

Paths handed to ``FileSystem`` methods are absolute.  Relative paths,
``.``/``..`` segments and the ``~`` shorthand are handled by the pure
``resolve_path()`` function before a path ever reaches the tree.

Faults use the built-in ``OSError`` family:

    - ``FileNotFoundError``  — the path (or its parent) does not exist.
    - ``NotADirectoryError`` — a directory was required.
    - ``FileExistsError``    — the name is already taken in that directory.
    - ``IsADirectoryError``  — file content was requested from a directory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from itertools import count
from typing import Any


class FileType(StrEnum):
    """The kind of object a node represents."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class DirEntry:
    """One row of a directory listing."""

    name: str
    file_type: FileType

    @property
    def is_dir(self) -> bool:
        """Return True if the entry is a directory."""
        return self.file_type is FileType.DIRECTORY


@dataclass(frozen=True)
class NodeInfo:
    """Read-only snapshot of a node (returned by lookup)."""

    node_id: int
    name: str
    file_type: FileType
    size: int
    parent_id: int | None


@dataclass
class _Node:
    """Internal node record.

    For files, ``content`` holds the text.
    For directories, ``children`` maps names to node ids.
    """

    node_id: int
    name: str
    file_type: FileType
    parent_id: int | None = None
    content: str = ""
    children: dict[str, int] = field(default_factory=dict)  # pyright: ignore[reportUnknownVariableType]

    @property
    def size(self) -> int:
        """Return the content length (or child count for directories)."""
        if self.file_type is FileType.DIRECTORY:
            return len(self.children)
        return len(self.content)

    def to_info(self) -> NodeInfo:
        """Create a read-only snapshot of this node."""
        return NodeInfo(
            node_id=self.node_id,
            name=self.name,
            file_type=self.file_type,
            size=self.size,
            parent_id=self.parent_id,
        )


ROOT_PATH = "/"


def resolve_path(raw: str, cwd: str, *, home: str = ROOT_PATH) -> str:
    """Turn *raw* into a normalised absolute path.

    Pure string manipulation — the result need not exist.

    Examples::

        resolve_path("..", "/a/b")        → "/a"
        resolve_path("../../..", "/a")    → "/"
        resolve_path("~/x", "/tmp", home="/home/user") → "/home/user/x"
        resolve_path("", "/etc")          → "/etc"

    Args:
        raw: The path as typed (absolute, relative, or ``~``-prefixed).
        cwd: Absolute working directory used for relative paths.
        home: Absolute path that a leading ``~`` expands to.

    """
    if not raw:
        return _normalise(cwd)

    if raw == "~" or raw.startswith("~/"):
        base = home
        raw = raw[1:]
    elif raw.startswith("/"):
        base = ROOT_PATH
    else:
        base = cwd

    parts: list[str] = [p for p in base.split("/") if p and p != "."]
    for segment in raw.split("/"):
        if not segment or segment == ".":
            continue
        if segment == "..":
            # Clamp at root: popping an empty list is a no-op.
            if parts:
                parts.pop()
            continue
        parts.append(segment)
    return "/" + "/".join(parts)


def _normalise(path: str) -> str:
    """Collapse duplicate slashes and dot segments in an absolute path."""
    return resolve_path(path or ROOT_PATH, ROOT_PATH)


def split_path(path: str) -> tuple[str, str]:
    """Split an absolute path into (parent_path, child_name).

    Examples::

        "/foo/bar/baz.txt" → ("/foo/bar", "baz.txt")
        "/hello.txt"       → ("/", "hello.txt")
        "/"                → ("", "")

    """
    path = _normalise(path)
    if path == ROOT_PATH:
        return ("", "")
    last_slash = path.rfind("/")
    if last_slash == 0:
        return (ROOT_PATH, path[1:])
    return (path[:last_slash], path[last_slash + 1 :])


class FileSystem:
    """An in-memory tree of files and directories.

    The file system is initialised with an empty root directory at
    ``/``.  All operations take absolute paths.
    """

    def __init__(self) -> None:
        """Create a file system with an empty root directory."""
        self._ids = count(start=0)
        root = _Node(node_id=next(self._ids), name="", file_type=FileType.DIRECTORY)
        self._nodes: dict[int, _Node] = {root.node_id: root}
        self._root_id: int = root.node_id

    # -- resolution --------------------------------------------------------

    def _resolve(self, path: str) -> _Node | None:
        """Walk *path* from the root and return its node, or None."""
        current = self._nodes[self._root_id]
        for part in _normalise(path).strip("/").split("/"):
            if not part:
                continue
            if current.file_type is not FileType.DIRECTORY:
                return None
            child_id = current.children.get(part)
            if child_id is None:
                return None
            current = self._nodes[child_id]
        return current

    def _require(self, path: str) -> _Node:
        """Resolve *path* or raise FileNotFoundError."""
        node = self._resolve(path)
        if node is None:
            msg = f"Path not found: {path}"
            raise FileNotFoundError(msg)
        return node

    def _require_dir(self, path: str) -> _Node:
        """Resolve *path* to a directory node."""
        node = self._require(path)
        if node.file_type is not FileType.DIRECTORY:
            msg = f"Not a directory: {path}"
            raise NotADirectoryError(msg)
        return node

    def _require_file(self, path: str) -> _Node:
        """Resolve *path* to a file node."""
        node = self._require(path)
        if node.file_type is FileType.DIRECTORY:
            msg = f"Is a directory: {path}"
            raise IsADirectoryError(msg)
        return node

    def path_of(self, node_id: int) -> str:
        """Rebuild the absolute path of a node by following parent ids."""
        names: list[str] = []
        node = self._nodes[node_id]
        while node.parent_id is not None:
            names.append(node.name)
            node = self._nodes[node.parent_id]
        return "/" + "/".join(reversed(names))

    # -- queries -----------------------------------------------------------

    def exists(self, path: str) -> bool:
        """Check whether a path exists."""
        return self._resolve(path) is not None

    def is_dir(self, path: str) -> bool:
        """Check whether a path exists and is a directory."""
        node = self._resolve(path)
        return node is not None and node.file_type is FileType.DIRECTORY

    def lookup(self, path: str) -> NodeInfo:
        """Return a snapshot of the node at *path*.

        Raises:
            FileNotFoundError: If the path does not exist.

        """
        return self._require(path).to_info()

    def list_dir(self, path: str) -> list[DirEntry]:
        """List a directory in insertion order.

        Args:
            path: Absolute path to a directory.

        Raises:
            FileNotFoundError: If the path does not exist.
            NotADirectoryError: If the path is not a directory.

        """
        directory = self._require_dir(path)
        return [
            DirEntry(name=name, file_type=self._nodes[child_id].file_type)
            for name, child_id in directory.children.items()
        ]

    def read(self, path: str) -> str:
        """Return the content of a file.

        Raises:
            FileNotFoundError: If the path does not exist.
            IsADirectoryError: If the path is a directory.

        """
        return self._require_file(path).content

    # -- mutations ---------------------------------------------------------

    def create_file(self, path: str, content: str = "") -> None:
        """Create a file at *path*.

        Raises:
            FileExistsError: If the name is already taken.
            FileNotFoundError: If the parent directory does not exist.
            NotADirectoryError: If the parent is a file.

        """
        node = self._create(path, FileType.FILE)
        node.content = content

    def create_dir(self, path: str) -> None:
        """Create an empty directory at *path*.

        Raises:
            FileExistsError: If the name is already taken.
            FileNotFoundError: If the parent directory does not exist.
            NotADirectoryError: If the parent is a file.

        """
        self._create(path, FileType.DIRECTORY)

    def _create(self, path: str, file_type: FileType) -> _Node:
        """Allocate a node and link it into its parent directory."""
        parent_path, name = split_path(path)
        if not name:
            msg = f"Already exists: {ROOT_PATH}"
            raise FileExistsError(msg)
        parent = self._resolve(parent_path)
        if parent is None:
            msg = f"Parent directory not found: {parent_path}"
            raise FileNotFoundError(msg)
        if parent.file_type is not FileType.DIRECTORY:
            msg = f"Not a directory: {parent_path}"
            raise NotADirectoryError(msg)
        if name in parent.children:
            msg = f"Already exists: {name}"
            raise FileExistsError(msg)

        node = _Node(
            node_id=next(self._ids),
            name=name,
            file_type=file_type,
            parent_id=parent.node_id,
        )
        self._nodes[node.node_id] = node
        parent.children[name] = node.node_id
        return node

    def write(self, path: str, content: str, *, append: bool = False) -> None:
        """Write *content* to a file, creating it if it is missing.

        Args:
            path: Absolute path to a file.
            content: Text to store.
            append: Add to the existing content instead of replacing it.

        Raises:
            FileNotFoundError: If the parent directory does not exist.
            NotADirectoryError: If the parent is a file.
            IsADirectoryError: If the path is a directory.

        """
        node = self._resolve(path)
        if node is None:
            self.create_file(path, content)
            return
        if node.file_type is FileType.DIRECTORY:
            msg = f"Is a directory: {path}"
            raise IsADirectoryError(msg)
        node.content = node.content + content if append else content

    def remove(self, path: str, *, recursive: bool = False) -> None:
        """Delete a file or directory.

        Args:
            path: Absolute path to delete.
            recursive: Allow deleting a non-empty directory and its subtree.

        Raises:
            FileNotFoundError: If the path does not exist.
            OSError: If the path is the root, or a non-empty directory
                and *recursive* is false.

        """
        node = self._require(path)
        if node.parent_id is None:
            msg = "Cannot remove root directory"
            raise OSError(msg)
        if node.children and not recursive:
            msg = f"Directory not empty: {path}"
            raise OSError(msg)

        parent = self._nodes[node.parent_id]
        del parent.children[node.name]
        self._drop_subtree(node)

    def _drop_subtree(self, node: _Node) -> None:
        """Free a node and all of its descendants from the table."""
        pending = [node]
        while pending:
            current = pending.pop()
            pending.extend(self._nodes[child_id] for child_id in current.children.values())
            del self._nodes[current.node_id]

    # -- serialization -----------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize the node table to a JSON-friendly dictionary."""
        nodes = {}
        for node_id, node in self._nodes.items():
            nodes[str(node_id)] = {
                "node_id": node.node_id,
                "name": node.name,
                "file_type": node.file_type.value,
                "parent_id": node.parent_id,
                "content": node.content,
                "children": dict(node.children),
            }
        return {"root_id": self._root_id, "nodes": nodes}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileSystem:
        """Deserialize a file system produced by ``to_dict()``.

        Raises:
            ValueError: If the data holds no root directory.

        """
        fs = object.__new__(cls)
        fs._root_id = data["root_id"]
        fs._nodes = {}
        for node_data in data["nodes"].values():
            node = _Node(
                node_id=node_data["node_id"],
                name=node_data["name"],
                file_type=FileType(node_data["file_type"]),
                parent_id=node_data.get("parent_id"),
                content=node_data.get("content", ""),
                children=dict(node_data.get("children", {})),
            )
            fs._nodes[node.node_id] = node
        if fs._root_id not in fs._nodes:
            msg = "Serialized file system has no root node"
            raise ValueError(msg)
        fs._ids = count(start=max(fs._nodes) + 1)
        return fs

    def populate(self, tree: dict[str, Any], *, base: str = ROOT_PATH) -> None:
        """Create a nested seed tree under *base*.

        Dict values become directories, string values become files::

            {"home": {"user": {"readme.txt": "hello"}}, "tmp": {}}

        Existing directories are reused, so seeding is idempotent for them.
        """
        for name, value in tree.items():
            path = base.rstrip("/") + "/" + name
            if isinstance(value, dict):
                if not self.is_dir(path):
                    self.create_dir(path)
                self.populate(value, base=path)  # pyright: ignore[reportUnknownArgumentType]
            else:
                self.write(path, str(value))
