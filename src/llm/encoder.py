"""Encode files and raw bytes into base64 attachments.

Images are always sent as ``image/png``; audio defaults to ``audio/mp3``
unless the caller supplies a MIME type.
"""

import asyncio
import base64
import logging
from pathlib import Path

from .base import MediaKind, MediaPart

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPE = "image/png"
AUDIO_MIME_TYPE = "audio/mp3"

DEFAULT_MIME_TYPES = {
    MediaKind.IMAGE: IMAGE_MIME_TYPE,
    MediaKind.AUDIO: AUDIO_MIME_TYPE,
}


def encode_bytes(data: bytes, kind: MediaKind, mime_type: str | None = None) -> MediaPart:
    """Base64-encode a byte buffer.

    Args:
        data: Raw bytes
        kind: Media kind of the payload
        mime_type: Override the default MIME type for ``kind``

    Returns:
        MediaPart ready to attach to a request
    """
    return MediaPart(
        data=base64.b64encode(data).decode("ascii"),
        mime_type=mime_type or DEFAULT_MIME_TYPES[kind],
        kind=kind,
    )


def from_base64(data: str, mime_type: str, kind: MediaKind = MediaKind.AUDIO) -> MediaPart:
    """Wrap an already-encoded payload."""
    return MediaPart(data=data, mime_type=mime_type, kind=kind)


async def encode_file(
    path: str | Path,
    kind: MediaKind,
    mime_type: str | None = None,
) -> MediaPart:
    """Read a file off the event loop and encode it.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    data = await asyncio.to_thread(path.read_bytes)
    logger.debug(f"Encoded {kind.value} {path} ({len(data)} bytes)")
    return encode_bytes(data, kind, mime_type)


async def encode_files(paths: list[str | Path], kind: MediaKind) -> tuple[MediaPart, ...]:
    """Encode several files concurrently, preserving input order."""
    parts = await asyncio.gather(*(encode_file(p, kind) for p in paths))
    return tuple(parts)
