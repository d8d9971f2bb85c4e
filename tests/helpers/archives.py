"""
In-memory archive builders and stream doubles for tests.
"""
from __future__ import annotations

import base64
import gzip
import io
import tarfile
import zipfile
from typing import Dict, Iterable, Iterator, Optional, Tuple

import zstandard as zstd

# Zip of a single 2-byte `command` file (mode 0644), produced by Info-ZIP
TEST_ZIP = base64.b64decode(
    "UEsDBAoAAAAAAOKAxFbxsdyoAgAAAAIAAAAHABwAY29tbWFuZFVUCQADGDh8ZBg4fGR1eAsAAQT1AQAABBQAAADazFBL"
    "AQIeAwoAAAAAAOKAxFbxsdyoAgAAAAIAAAAHABgAAAAAAAEAAACkgQAAAABjb21tYW5kVVQFAAMYOHxkdXgLAAEE9QEA"
    "AAQUAAAAUEsFBgAAAAABAAEATQAAAEMAAAAAAA=="
)
TEST_ZIP_SHA256 = {
    "command": "4a553e10c72a1df61b3601a2c402808e21fe6028209d1e6acfce26d451d738e3",
}

# name -> (content, mode or None for "no permission bits recorded")
Entries = Dict[str, Tuple[bytes, Optional[int]]]


def build_zip(entries: Entries, dirs: Iterable[str] = (),
              compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    """Build a zip archive in memory."""
    out = io.BytesIO()
    with zipfile.ZipFile(out, "w", compression=compression) as zf:
        for name in dirs:
            info = zipfile.ZipInfo(name.rstrip("/") + "/")
            info.external_attr = (0o040755 << 16) | 0x10
            zf.writestr(info, b"")
        for name, (content, mode) in entries.items():
            info = zipfile.ZipInfo(name)
            info.compress_type = compression
            info.external_attr = ((0o100000 | mode) << 16) if mode is not None else 0
            zf.writestr(info, content)
            if mode is None:
                # Writing fills in 0o600 for a zero external_attr; the central
                # directory is only emitted on close, so clear it again here
                zf.getinfo(name).external_attr = 0
    return out.getvalue()


def build_tar(entries: Entries, dirs: Iterable[str] = (),
              compression: Optional[str] = "gz", zst_frame_size: Optional[int] = None) -> bytes:
    """
    Build a tar archive in memory; compression is "gz", "zst" or None.

    With zst_frame_size the Zstandard output is split into several frames.
    """
    raw = io.BytesIO()
    with tarfile.open(fileobj=raw, mode="w", format=tarfile.USTAR_FORMAT) as tf:
        for name in dirs:
            info = tarfile.TarInfo(name)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tf.addfile(info)
        for name, (content, mode) in entries.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = mode if mode is not None else 0
            tf.addfile(info, io.BytesIO(content))
    data = raw.getvalue()

    if compression == "gz":
        return gzip.compress(data)
    if compression == "zst":
        cctx = zstd.ZstdCompressor(level=3)
        if zst_frame_size is None:
            return cctx.compress(data)
        # One independent frame per slice, as parallel compressors write them
        return b"".join(cctx.compress(part) for part in chunked(data, zst_frame_size))
    return data


def chunked(data: bytes, size: int) -> Iterator[bytes]:
    """Yield `data` in fragments of `size` bytes (the last may be shorter)."""
    for offset in range(0, len(data), size):
        yield data[offset:offset + size]


def failing_stream(fragments: Iterable[object], exc: Exception) -> Iterator[object]:
    """Yield `fragments`, then raise `exc` as a broken transport would."""
    yield from fragments
    raise exc
