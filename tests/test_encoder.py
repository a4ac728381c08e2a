"""Tests for media encoding."""

import base64

import pytest

from src.llm.base import MediaKind
from src.llm.encoder import encode_bytes, encode_file, encode_files, from_base64


class TestEncodeBytes:
    """Tests for in-memory encoding."""

    def test_image_defaults_to_png(self):
        """Images are tagged image/png regardless of source format."""
        part = encode_bytes(b"abc", MediaKind.IMAGE)
        assert part.mime_type == "image/png"
        assert part.kind == MediaKind.IMAGE
        assert base64.b64decode(part.data) == b"abc"

    def test_audio_defaults_to_mp3(self):
        assert encode_bytes(b"abc", MediaKind.AUDIO).mime_type == "audio/mp3"

    def test_mime_override(self):
        """A caller-supplied MIME type wins over the default."""
        part = encode_bytes(b"abc", MediaKind.AUDIO, mime_type="audio/wav")
        assert part.mime_type == "audio/wav"

    def test_from_base64_keeps_payload(self):
        """Already-encoded audio is passed through untouched."""
        part = from_base64("QUJD", "audio/webm")
        assert part.data == "QUJD"
        assert part.mime_type == "audio/webm"
        assert part.kind == MediaKind.AUDIO


class TestEncodeFile:
    """Tests for reading and encoding files."""

    @pytest.mark.asyncio
    async def test_encode_file(self, image_file):
        part = await encode_file(image_file, MediaKind.IMAGE)
        assert base64.b64decode(part.data) == image_file.read_bytes()

    @pytest.mark.asyncio
    async def test_encode_files_preserves_order(self, tmp_path):
        """Concurrent encoding keeps the caller's order."""
        paths = []
        for i in range(3):
            p = tmp_path / f"{i}.png"
            p.write_bytes(f"image-{i}".encode())
            paths.append(p)

        parts = await encode_files(paths, MediaKind.IMAGE)

        assert [base64.b64decode(p.data) for p in parts] == [b"image-0", b"image-1", b"image-2"]

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path):
        """File errors propagate unchanged."""
        with pytest.raises(FileNotFoundError):
            await encode_file(tmp_path / "nope.png", MediaKind.IMAGE)
