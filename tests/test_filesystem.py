"""Tests for the virtual file system.

The file system keeps every node in a table keyed by id.  Directories
map names to child ids in insertion order, parents are referenced by
id, and paths are resolved by a pure function before they reach the
tree.
"""

import pytest

from termkit.fs import DirEntry, FileSystem, FileType, resolve_path, split_path

ROOT_PATH = "/"


class TestResolvePath:
    """Verify pure path resolution."""

    def test_parent_of_nested_directory(self) -> None:
        """'..' from /a/b should land on /a."""
        assert resolve_path("..", "/a/b") == "/a"

    def test_never_escapes_root(self) -> None:
        """Too many '..' segments clamp at the root."""
        assert resolve_path("../../..", "/a") == "/"

    def test_tilde_expands_to_home(self) -> None:
        """A leading ~ should expand to HOME regardless of cwd."""
        assert resolve_path("~/x", "/tmp", home="/home/user") == "/home/user/x"
        assert resolve_path("~/x", "/", home="/home/user") == "/home/user/x"

    def test_bare_tilde(self) -> None:
        """A lone ~ is the home directory."""
        assert resolve_path("~", "/etc", home="/home/user") == "/home/user"

    def test_empty_input_is_cwd(self) -> None:
        """Resolving an empty string returns the working directory."""
        assert resolve_path("", "/etc") == "/etc"

    def test_absolute_ignores_cwd(self) -> None:
        """Absolute paths start from the root."""
        assert resolve_path("/var/log", "/home/user") == "/var/log"

    def test_relative_joins_cwd(self) -> None:
        """Relative paths are appended to the working directory."""
        assert resolve_path("projects/demo", "/home/user") == "/home/user/projects/demo"

    def test_dots_and_duplicate_slashes(self) -> None:
        """'.' segments and empty segments are dropped."""
        assert resolve_path("./a//b/./c/", "/") == "/a/b/c"

    def test_tilde_inside_name_is_literal(self) -> None:
        """Only a leading ~ is special."""
        assert resolve_path("a~b", "/x") == "/x/a~b"

    def test_split_path(self) -> None:
        """split_path separates the parent from the final name."""
        assert split_path("/foo/bar/baz.txt") == ("/foo/bar", "baz.txt")
        assert split_path("/hello.txt") == ("/", "hello.txt")
        assert split_path("/") == ("", "")


class TestFileSystemCreation:
    """Verify the initial state of a fresh file system."""

    def test_root_directory_exists(self) -> None:
        """A new file system should have a root directory."""
        fs = FileSystem()
        assert fs.exists(ROOT_PATH)
        assert fs.is_dir(ROOT_PATH)

    def test_root_has_no_parent(self) -> None:
        """The root node has no parent id."""
        fs = FileSystem()
        info = fs.lookup(ROOT_PATH)
        assert info.parent_id is None
        assert info.file_type is FileType.DIRECTORY

    def test_root_is_empty(self) -> None:
        """A fresh root directory should have no entries."""
        fs = FileSystem()
        assert fs.list_dir(ROOT_PATH) == []


class TestListDirectory:
    """Verify listings and their ordering."""

    def test_new_directory_is_empty(self) -> None:
        """A newly created directory lists as an empty sequence."""
        fs = FileSystem()
        fs.create_dir("/dir")
        assert fs.list_dir("/dir") == []

    def test_single_file_listing(self) -> None:
        """After creating one file the listing holds exactly that file."""
        fs = FileSystem()
        fs.create_dir("/dir")
        fs.create_file("/dir/f")
        assert fs.list_dir("/dir") == [DirEntry(name="f", file_type=FileType.FILE)]

    def test_insertion_order_is_kept(self) -> None:
        """Entries come back in the order they were created, not sorted."""
        fs = FileSystem()
        for name in ("zeta", "alpha", "mid"):
            fs.create_file(f"/{name}")
        assert [e.name for e in fs.list_dir("/")] == ["zeta", "alpha", "mid"]

    def test_missing_path_raises(self) -> None:
        """Listing a missing path is a PathNotFound fault."""
        fs = FileSystem()
        with pytest.raises(FileNotFoundError, match="nope"):
            fs.list_dir("/nope")

    def test_file_path_raises(self) -> None:
        """Listing a file is a NotADirectory fault."""
        fs = FileSystem()
        fs.create_file("/f")
        with pytest.raises(NotADirectoryError):
            fs.list_dir("/f")

    def test_entries_report_kind(self) -> None:
        """Directory entries know whether they are directories."""
        fs = FileSystem()
        fs.create_dir("/d")
        fs.create_file("/f")
        entries = {e.name: e.is_dir for e in fs.list_dir("/")}
        assert entries == {"d": True, "f": False}


class TestLookup:
    """Verify node lookups."""

    def test_lookup_file(self) -> None:
        """Lookup returns a snapshot with name, kind, and size."""
        fs = FileSystem()
        fs.create_file("/notes.txt", "hello")
        info = fs.lookup("/notes.txt")
        assert info.name == "notes.txt"
        assert info.file_type is FileType.FILE
        assert info.size == 5

    def test_lookup_missing_raises(self) -> None:
        """Looking up a missing path raises FileNotFoundError."""
        fs = FileSystem()
        with pytest.raises(FileNotFoundError):
            fs.lookup("/missing")

    def test_lookup_through_a_file_raises(self) -> None:
        """A file cannot be traversed like a directory."""
        fs = FileSystem()
        fs.create_file("/f")
        with pytest.raises(FileNotFoundError):
            fs.lookup("/f/child")

    def test_parent_id_links_back(self) -> None:
        """A child's parent id names its directory, and paths can be rebuilt."""
        fs = FileSystem()
        fs.create_dir("/a")
        fs.create_file("/a/b")
        parent = fs.lookup("/a")
        child = fs.lookup("/a/b")
        assert child.parent_id == parent.node_id
        assert fs.path_of(child.node_id) == "/a/b"


class TestMutations:
    """Verify create, write, and remove."""

    def test_create_duplicate_raises(self) -> None:
        """Sibling names must be unique."""
        fs = FileSystem()
        fs.create_file("/hello.txt")
        with pytest.raises(FileExistsError, match=r"hello\.txt"):
            fs.create_file("/hello.txt")
        with pytest.raises(FileExistsError):
            fs.create_dir("/hello.txt")

    def test_create_in_missing_directory_raises(self) -> None:
        """The parent directory must exist."""
        fs = FileSystem()
        with pytest.raises(FileNotFoundError, match="nope"):
            fs.create_file("/nope/hello.txt")

    def test_create_under_a_file_raises(self) -> None:
        """The parent must be a directory."""
        fs = FileSystem()
        fs.create_file("/f")
        with pytest.raises(NotADirectoryError):
            fs.create_dir("/f/sub")

    def test_create_root_raises(self) -> None:
        """The root already exists."""
        fs = FileSystem()
        with pytest.raises(FileExistsError):
            fs.create_dir("/")

    def test_write_and_read(self) -> None:
        """Written content can be read back."""
        fs = FileSystem()
        fs.create_file("/f")
        fs.write("/f", "one")
        assert fs.read("/f") == "one"

    def test_write_append(self) -> None:
        """Appending keeps the existing content."""
        fs = FileSystem()
        fs.write("/f", "one\n")
        fs.write("/f", "two\n", append=True)
        assert fs.read("/f") == "one\ntwo\n"

    def test_write_creates_missing_file(self) -> None:
        """Writing to a missing file in an existing directory creates it."""
        fs = FileSystem()
        fs.write("/new.txt", "data")
        assert fs.read("/new.txt") == "data"

    def test_write_to_directory_raises(self) -> None:
        """Directories have no content."""
        fs = FileSystem()
        fs.create_dir("/d")
        with pytest.raises(IsADirectoryError):
            fs.write("/d", "x")
        with pytest.raises(IsADirectoryError):
            fs.read("/d")

    def test_remove_file(self) -> None:
        """Removed files disappear from their directory."""
        fs = FileSystem()
        fs.create_file("/f")
        fs.remove("/f")
        assert not fs.exists("/f")
        assert fs.list_dir("/") == []

    def test_remove_non_empty_directory_needs_recursive(self) -> None:
        """A directory with children is only removed recursively."""
        fs = FileSystem()
        fs.create_dir("/d")
        fs.create_file("/d/f")
        with pytest.raises(OSError, match="not empty"):
            fs.remove("/d")
        fs.remove("/d", recursive=True)
        assert not fs.exists("/d")
        assert not fs.exists("/d/f")

    def test_remove_root_raises(self) -> None:
        """The root can never be removed."""
        fs = FileSystem()
        with pytest.raises(OSError, match="root"):
            fs.remove("/")

    def test_remove_missing_raises(self) -> None:
        """Removing a missing path raises FileNotFoundError."""
        fs = FileSystem()
        with pytest.raises(FileNotFoundError):
            fs.remove("/ghost")

    def test_name_can_be_reused_after_remove(self) -> None:
        """Removing frees the name in its directory."""
        fs = FileSystem()
        fs.create_file("/f")
        fs.remove("/f")
        fs.create_dir("/f")
        assert fs.is_dir("/f")


class TestPopulateAndSerialize:
    """Verify seeding and the table round trip."""

    def test_populate_nested_tree(self) -> None:
        """Dicts become directories and strings become files."""
        fs = FileSystem()
        fs.populate({"etc": {"motd": "hi"}, "tmp": {}})
        assert fs.is_dir("/etc")
        assert fs.read("/etc/motd") == "hi"
        assert fs.list_dir("/tmp") == []

    def test_serialized_tree_is_equivalent(self) -> None:
        """from_dict(to_dict()) rebuilds the same tree and keeps allocating ids."""
        fs = FileSystem()
        fs.populate({"home": {"user": {"a.txt": "A"}}})
        clone = FileSystem.from_dict(fs.to_dict())
        assert clone.read("/home/user/a.txt") == "A"
        clone.create_file("/home/user/b.txt")
        ids = {clone.lookup(p).node_id for p in ("/", "/home", "/home/user/a.txt", "/home/user/b.txt")}
        assert len(ids) == 4

    def test_from_dict_without_root_is_rejected(self) -> None:
        """A table with no root node cannot be loaded."""
        with pytest.raises(ValueError, match="root"):
            FileSystem.from_dict({"root_id": 0, "nodes": {}})
