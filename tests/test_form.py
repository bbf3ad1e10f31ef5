"""Tests for oobmultipart.form module."""

import io

import pytest

from oobmultipart import FormPartSource, MultipartEncoder, NoMoreParts, Part, encode_multipart


def body_and_boundary(data=None, files=None):
    content_type, encoder = encode_multipart(data, files)
    return encoder.read(), content_type.split("boundary=")[1]


class TestEncodeMultipart:
    """Tests for encode_multipart function."""

    def test_content_type(self):
        """Test the content type carries the encoder's boundary."""
        content_type, encoder = encode_multipart({"a": "1"}, boundary="B")
        assert content_type == "multipart/form-data; boundary=B"
        assert encoder.boundary == "B"

    def test_fields_then_files(self, decoder):
        """Test data fields precede files and decode correctly."""
        body, boundary = body_and_boundary(
            {"field1": "value1", "field2": "value2"}, {"upload": b"file content"}
        )
        parts = decoder(body, boundary)
        assert [data for _, data in parts] == [b"value1", b"value2", b"file content"]
        assert parts[2][0] == [
            ("Content-Disposition", 'form-data; name="upload"; filename="upload"'),
            ("Content-Type", "application/octet-stream"),
        ]

    def test_file_tuple(self, decoder):
        """Test (filename, content, content_type) tuples."""
        body, boundary = body_and_boundary(
            files={"doc": ("report.pdf", b"PDF content", "application/pdf")}
        )
        headers, data = decoder(body, boundary)[0]
        assert ("Content-Type", "application/pdf") in headers
        assert ("Content-Disposition", 'form-data; name="doc"; filename="report.pdf"') in headers
        assert data == b"PDF content"

    def test_file_tuple_without_content_type(self):
        """Test tuples with None content type use octet-stream."""
        body, _ = body_and_boundary(files={"doc": ("file.bin", b"binary", None)})
        assert b"Content-Type: application/octet-stream" in body

    def test_file_object(self):
        """Test readable objects are streamed."""
        body, _ = body_and_boundary(files={"f": io.BytesIO(b"streamed")})
        assert b"\r\n\r\nstreamed\r\n--" in body

    def test_empty_form(self):
        """Test an empty form yields only the closing delimiter."""
        body, boundary = body_and_boundary()
        assert body == f"\r\n--{boundary}--".encode()

    def test_unique_boundaries(self):
        """Test each call generates a fresh boundary."""
        ct1, _ = encode_multipart({"a": "1"})
        ct2, _ = encode_multipart({"a": "1"})
        assert ct1 != ct2

    def test_bad_file_tuple(self):
        """Test malformed file tuples are rejected."""
        _, encoder = encode_multipart(files={"f": ("name", b"x")})
        with pytest.raises(ValueError, match="filename, content, content_type"):
            encoder.read()


class TestFormPartSourcePaths:
    """Tests for lazily opened file paths."""

    def test_path_opened_lazily(self, tmp_path, mocker):
        """Test a path is opened only when its part is requested."""
        path = tmp_path / "a.txt"
        path.write_bytes(b"aaa")
        opener = mocker.patch("builtins.open", wraps=open)
        source = FormPartSource({"x": "1"}, {"a": path})
        source.next_part(Part())
        opener.assert_not_called()
        source.next_part(Part())
        opener.assert_called_once_with(path, "rb")
        source.close()

    def test_previous_file_closed(self, tmp_path):
        """Test each opened file is closed before the next part starts."""
        for name in ("a.txt", "b.txt"):
            (tmp_path / name).write_bytes(name.encode())
        source = FormPartSource(files={"a": tmp_path / "a.txt", "b": str(tmp_path / "b.txt")})
        first = Part()
        source.next_part(first)
        opened = first.body
        assert not opened.closed
        source.next_part(Part())
        assert opened.closed
        with pytest.raises(NoMoreParts):
            source.next_part(Part())
        assert source._opened is None

    def test_context_manager_closes_open_file(self, tmp_path):
        """Test leaving the with block closes a file left open mid-stream."""
        path = tmp_path / "a.txt"
        path.write_bytes(b"aaa")
        with FormPartSource(files={"a": path}) as source:
            part = Part()
            source.next_part(part)
        assert part.body.closed

    def test_encoder_reset_closes_open_file(self, tmp_path):
        """Test resetting the encoder mid-stream closes the current file."""
        path = tmp_path / "a.txt"
        path.write_bytes(b"aaa" * 100)
        source = FormPartSource(files={"a": path})
        encoder = MultipartEncoder(provider=source, boundary="B")
        encoder.fill(bytearray(8))
        opened = source._opened
        assert opened is not None and not opened.closed
        encoder.reset(provider=[], boundary="B")
        assert opened.closed

    def test_path_filename_is_basename(self, tmp_path, decoder):
        """Test paths use their base name as the filename."""
        path = tmp_path / "report.csv"
        path.write_bytes(b"a,b\n1,2\n")
        body, boundary = body_and_boundary(files={"report": path})
        headers, data = decoder(body, boundary)[0]
        assert ("Content-Disposition", 'form-data; name="report"; filename="report.csv"') in headers
        assert data == b"a,b\n1,2\n"

    def test_path_inside_tuple(self, tmp_path):
        """Test a path given as tuple content is opened too."""
        path = tmp_path / "data.json"
        path.write_bytes(b"{}")
        body, _ = body_and_boundary(files={"d": ("custom.json", str(path), "application/json")})
        assert b'filename="custom.json"' in body
        assert b"Content-Type: application/json\r\n\r\n{}" in body

    def test_missing_path_error_propagates(self, tmp_path):
        """Test open errors surface from the encoder unchanged."""
        _, encoder = encode_multipart(files={"f": tmp_path / "missing.bin"})
        with pytest.raises(FileNotFoundError):
            encoder.read()
