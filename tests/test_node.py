"""Tests for FileNode content and metadata behavior."""

import stat

import pytest

from memxfer import FileNode, InvalidOperationError


class TestReadAt:
    """Test positional reads."""

    def test_read_within_content(self):
        node = FileNode("/f", write_delay=0)
        node.write_at(b"hello", 0)

        assert node.read_at(3, 1) == b"ell"

    def test_short_read_at_end(self):
        """A read crossing the end returns only the available bytes."""
        node = FileNode("/f", write_delay=0)
        node.write_at(b"hello", 0)

        assert node.read_at(10, 3) == b"lo"

    def test_read_at_or_past_end_is_empty(self):
        node = FileNode("/f", write_delay=0)
        node.write_at(b"hello", 0)

        assert node.read_at(4, 5) == b""
        assert node.read_at(4, 100) == b""

    def test_negative_offset_raises(self):
        node = FileNode("/f", write_delay=0)

        with pytest.raises(ValueError, match="negative offset"):
            node.read_at(1, -1)

    def test_readinto_reports_count(self):
        node = FileNode("/f", write_delay=0)
        node.write_at(b"abcdef", 0)

        buf = bytearray(4)
        assert node.readinto_at(buf, 0) == 4
        assert bytes(buf) == b"abcd"

        buf = bytearray(4)
        assert node.readinto_at(buf, 4) == 2
        assert bytes(buf[:2]) == b"ef"

        assert node.readinto_at(bytearray(4), 6) == 0

    def test_readinto_negative_offset_raises(self):
        node = FileNode("/f", write_delay=0)

        with pytest.raises(ValueError):
            node.readinto_at(bytearray(1), -5)


class TestWriteAt:
    """Test positional writes."""

    def test_write_returns_count(self):
        node = FileNode("/f", write_delay=0)

        assert node.write_at(b"abc", 0) == 3
        assert node.size == 3

    def test_write_past_end_zero_fills_gap(self):
        node = FileNode("/f", write_delay=0)
        node.write_at(b"ab", 0)

        node.write_at(b"xy", 5)

        assert node.size == 7
        assert node.read_at(7, 0) == b"ab\x00\x00\x00xy"

    def test_overwrite_never_shrinks(self):
        node = FileNode("/f", write_delay=0)
        node.write_at(b"abcdef", 0)

        node.write_at(b"XY", 1)

        assert node.read_at(100, 0) == b"aXYdef"
        assert node.size == 6

    @pytest.mark.parametrize("prior", [0, 3, 10])
    def test_written_bytes_read_back(self, prior):
        """Written bytes read back for any prior content length."""
        node = FileNode("/f", write_delay=0)
        node.write_at(b"z" * prior, 0)

        node.write_at(b"payload", 4)

        assert node.read_at(7, 4) == b"payload"

    def test_negative_offset_raises(self):
        node = FileNode("/f", write_delay=0)

        with pytest.raises(ValueError):
            node.write_at(b"x", -1)


class TestTruncate:
    """Test truncate in both directions."""

    def test_truncate_shrinks(self):
        node = FileNode("/f", write_delay=0)
        node.write_at(b"hello world", 0)

        node.truncate(5)

        assert node.size == 5
        assert node.read_at(100, 0) == b"hello"

    def test_truncate_extends_with_zeros(self):
        node = FileNode("/f", write_delay=0)
        node.write_at(b"hi", 0)

        node.truncate(6)

        assert node.size == 6
        assert node.read_at(100, 0) == b"hi\x00\x00\x00\x00"

    @pytest.mark.parametrize("size", [0, 1, 4, 64])
    def test_size_after_truncate(self, size):
        node = FileNode("/f", write_delay=0)
        node.write_at(b"four", 0)

        node.truncate(size)

        assert node.size == size

    def test_negative_size_raises(self):
        node = FileNode("/f", write_delay=0)

        with pytest.raises(ValueError):
            node.truncate(-1)

    def test_directory_cannot_be_truncated(self):
        node = FileNode("/d", is_dir=True)

        with pytest.raises(InvalidOperationError):
            node.truncate(0)


class TestMetadata:
    """Test kind, mode, name and stat snapshot."""

    def test_regular_file_mode(self):
        node = FileNode("/a/file.txt")

        assert stat.S_ISREG(node.mode)
        assert node.mode & 0o777 == 0o644
        assert node.is_dir is False
        assert node.is_symlink is False

    def test_directory_mode(self):
        node = FileNode("/a", is_dir=True)

        assert stat.S_ISDIR(node.mode)
        assert node.mode & 0o777 == 0o755

    def test_symlink_mode(self):
        node = FileNode("/link", symlink_target="/a")

        assert stat.S_ISLNK(node.mode)
        assert node.is_symlink
        assert node.symlink_target == "/a"

    def test_name_is_last_segment(self):
        assert FileNode("/a/b/file.txt").name == "file.txt"
        assert FileNode("/", is_dir=True).name == "/"

    def test_mod_time_fixed_at_creation(self):
        node = FileNode("/f", write_delay=0)
        created = node.mod_time

        node.write_at(b"more data", 0)
        node.truncate(2)

        assert node.mod_time == created

    def test_stat_snapshot(self):
        node = FileNode("/dir/f.bin", write_delay=0)
        node.write_at(b"12345", 0)

        info = node.stat()

        assert info.name == "f.bin"
        assert info.path == "/dir/f.bin"
        assert info.st_size == 5
        assert not info.is_dir
        assert not info.is_symlink
        assert info.modified_at == node.mod_time
        assert info.st_mtime == pytest.approx(node.mod_time.timestamp())

    def test_directory_size_is_zero(self):
        assert FileNode("/d", is_dir=True).stat().size == 0


class TestViews:
    """Test reader_at / writer_at and transfer error recording."""

    def test_directory_views_rejected(self):
        node = FileNode("/d", is_dir=True)

        with pytest.raises(InvalidOperationError):
            node.reader_at()
        with pytest.raises(InvalidOperationError):
            node.writer_at()

    def test_file_views_are_the_node(self):
        node = FileNode("/f")

        assert node.reader_at() is node
        assert node.writer_at() is node

    def test_transfer_error_is_recorded(self, caplog):
        node = FileNode("/f")
        err = ConnectionResetError("client went away")

        assert node.last_transfer_error is None
        with caplog.at_level("WARNING", logger="memxfer.node"):
            node.transfer_error(err)

        assert node.last_transfer_error is err
        assert "client went away" in caplog.text

    def test_transfer_error_does_not_affect_io(self):
        node = FileNode("/f", write_delay=0)
        node.transfer_error(EOFError())

        node.write_at(b"ok", 0)

        assert node.read_at(2, 0) == b"ok"
