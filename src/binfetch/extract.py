"""
Single-entry archive extraction.

Pulls exactly one named entry out of a fully collected archive buffer and
writes it next to its siblings in the destination directory, keeping the
entry's permission bits. One container format per call: zip, or tar (plain,
gzip or Zstandard compressed). Releases that are a bare binary use
`write_raw`.

A missing entry (or one that is a directory) is a normal outcome reported as
`Absent`; deciding whether that is fatal is up to the caller.
"""
from __future__ import annotations

import gzip
import io
import os
import tarfile
import tempfile
import zipfile
import zlib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union
from urllib.parse import urlparse

import zstandard as zstd

from .collector import CompletedBuffer
from .errors import MalformedArchiveError, WriteError

__all__ = [
    "DEFAULT_FILE_MODE",
    "RAW_FILE_MODE",
    "ArchiveEntry",
    "Written",
    "Absent",
    "ExtractResult",
    "Strategy",
    "strategy_for",
    "extract_one",
    "extract_one_tar",
    "write_raw",
    "run_strategy",
]

# Used when the container carries no permission bits for the entry
DEFAULT_FILE_MODE = 0o666

# Mode for releases that ship the bare binary
RAW_FILE_MODE = 0o755


@dataclass(frozen=True)
class ArchiveEntry:
    """
    A named member of an archive.

    Content is decompressed lazily by `read()`; the entry is only valid while
    the archive it came from is open.
    """
    name: str
    is_directory: bool
    file_mode: int
    _reader: Callable[[], bytes]

    def read(self) -> bytes:
        return self._reader()


@dataclass(frozen=True)
class Written:
    """Entry was written to `path`."""
    path: Path


@dataclass(frozen=True)
class Absent:
    """Entry is missing from the archive or is a directory."""
    name: str


ExtractResult = Union[Written, Absent]


class Strategy(str, Enum):
    """How a downloaded release is turned into the binary."""
    ZIP = "zip"
    TAR_GZ = "tar.gz"
    TAR_ZST = "tar.zst"
    RAW = "raw"


def strategy_for(url: str) -> Strategy:
    """
    Pick the extraction strategy from the URL's path suffix.

    Query strings and fragments are ignored. Anything that is not a known
    archive suffix is treated as the bare binary.
    """
    path = urlparse(url).path.lower()
    if path.endswith(".zip"):
        return Strategy.ZIP
    if path.endswith((".tar.gz", ".tgz")):
        return Strategy.TAR_GZ
    if path.endswith((".tar.zst", ".tzst")):
        return Strategy.TAR_ZST
    return Strategy.RAW


# ---------------------------------------------------------------------------
# Zip
# ---------------------------------------------------------------------------

def _open_zip(buffer: CompletedBuffer) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(io.BytesIO(buffer))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, ValueError) as exc:
        raise MalformedArchiveError(f"not a valid zip archive ({len(buffer)} bytes): {exc}") from exc


def _zip_entry(zf: zipfile.ZipFile, info: zipfile.ZipInfo) -> ArchiveEntry:
    # Unix permission bits live in the high half of external_attr
    mode = (info.external_attr >> 16) & 0o7777

    def _read() -> bytes:
        try:
            return zf.read(info)
        # RuntimeError: encrypted entry without a password
        except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError) as exc:
            raise MalformedArchiveError(f"cannot decompress '{info.filename}': {exc}") from exc

    return ArchiveEntry(
        name=info.filename,
        is_directory=info.is_dir(),
        file_mode=mode or DEFAULT_FILE_MODE,
        _reader=_read,
    )


def extract_one(buffer: CompletedBuffer, entry_name: str,
                destination_dir: Union[str, Path]) -> ExtractResult:
    """
    Extract one entry of a zip archive to `destination_dir/entry_name`.

    Args:
        buffer: Complete archive bytes
        entry_name: Exact entry name to extract
        destination_dir: Existing directory to write into

    Returns:
        Written(path) on success, Absent(entry_name) if the entry is missing
        or is a directory (nothing is written in that case)

    Raises:
        MalformedArchiveError: If the buffer is not a valid zip or the entry is corrupt
        WriteError: If the file cannot be written
    """
    with _open_zip(buffer) as zf:
        try:
            info = zf.getinfo(entry_name)
        except KeyError:
            return Absent(entry_name)
        entry = _zip_entry(zf, info)
        if entry.is_directory:
            return Absent(entry_name)
        data = entry.read()

    path = _write_file(Path(destination_dir) / entry_name, data, entry.file_mode)
    return Written(path)


# ---------------------------------------------------------------------------
# Tar
# ---------------------------------------------------------------------------

def _zstd_decompress(data: bytes) -> bytes:
    """Decompress every frame in `data`; a frame cut short is malformed."""
    parts = []
    while data:
        # decompressobj copes with frames that do not record their content size
        dobj = zstd.ZstdDecompressor().decompressobj()
        parts.append(dobj.decompress(data))
        if not dobj.eof:
            raise MalformedArchiveError("zstd stream ends inside a frame")
        data = dobj.unused_data
    return b"".join(parts)


def _open_tar(buffer: CompletedBuffer, compression: Optional[str]) -> tarfile.TarFile:
    # Compressed streams are inflated up front so their trailers (gzip CRC and
    # length, zstd frame end) are checked even when tar stops at its end marker
    try:
        if compression == "zst":
            payload = _zstd_decompress(bytes(buffer))
        elif compression == "gz":
            payload = gzip.decompress(bytes(buffer))
        elif compression is None:
            payload = buffer
        else:
            raise ValueError(f"Unknown tar compression: {compression}")
        return tarfile.open(fileobj=io.BytesIO(payload), mode="r:")
    except (tarfile.TarError, zstd.ZstdError, zlib.error, EOFError, OSError) as exc:
        raise MalformedArchiveError(f"not a valid tar archive ({len(buffer)} bytes): {exc}") from exc


def _tar_entry(tf: tarfile.TarFile, member: tarfile.TarInfo) -> ArchiveEntry:
    def _read() -> bytes:
        try:
            src = tf.extractfile(member)
            if src is None:
                raise MalformedArchiveError(f"'{member.name}' has no readable content")
            with src:
                return src.read()
        except (tarfile.TarError, EOFError, OSError) as exc:
            raise MalformedArchiveError(f"cannot read '{member.name}': {exc}") from exc

    return ArchiveEntry(
        name=member.name,
        # Links and devices are not extractable as a binary either
        is_directory=not member.isfile(),
        file_mode=(member.mode & 0o7777) or DEFAULT_FILE_MODE,
        _reader=_read,
    )


def extract_one_tar(buffer: CompletedBuffer, entry_name: str,
                    destination_dir: Union[str, Path],
                    compression: Optional[str] = "gz") -> ExtractResult:
    """
    Extract one entry of a tar archive; same contract as `extract_one`.

    Args:
        compression: "gz", "zst" or None for an uncompressed tar
    """
    with _open_tar(buffer, compression) as tf:
        try:
            member = tf.getmember(entry_name)
        except KeyError:
            return Absent(entry_name)
        # getmember() only sees headers read so far; a truncated body surfaces here
        except (tarfile.TarError, EOFError, OSError) as exc:
            raise MalformedArchiveError(f"cannot index tar archive: {exc}") from exc
        entry = _tar_entry(tf, member)
        if entry.is_directory:
            return Absent(entry_name)
        data = entry.read()

    path = _write_file(Path(destination_dir) / entry_name, data, entry.file_mode)
    return Written(path)


# ---------------------------------------------------------------------------
# Raw binary and dispatch
# ---------------------------------------------------------------------------

def write_raw(buffer: CompletedBuffer, file_name: str,
              destination_dir: Union[str, Path], mode: int = RAW_FILE_MODE) -> Written:
    """Write a release that is the binary itself."""
    return Written(_write_file(Path(destination_dir) / file_name, buffer, mode))


def run_strategy(strategy: Strategy, buffer: CompletedBuffer, bin_name: str,
                 destination_dir: Union[str, Path]) -> ExtractResult:
    """Apply `strategy` to a downloaded release."""
    if strategy is Strategy.ZIP:
        return extract_one(buffer, bin_name, destination_dir)
    if strategy is Strategy.TAR_GZ:
        return extract_one_tar(buffer, bin_name, destination_dir, compression="gz")
    if strategy is Strategy.TAR_ZST:
        return extract_one_tar(buffer, bin_name, destination_dir, compression="zst")
    return write_raw(buffer, bin_name, destination_dir)


def _write_file(target_path: Path, data: CompletedBuffer, mode: int) -> Path:
    """
    Write `data` to `target_path` with exactly `mode`, replacing any existing file.

    Goes through a temp file in the same directory so a failed write never
    leaves a half-written binary behind.
    """
    try:
        fd, temp_name = tempfile.mkstemp(prefix=".binfetch.tmp.", dir=target_path.parent)
    except OSError as exc:
        raise WriteError(f"cannot write {target_path}: {exc}", path=str(target_path)) from exc

    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as out:
            out.write(data)
            out.flush()
            os.fsync(out.fileno())
        os.chmod(temp_path, mode)
        os.replace(temp_path, target_path)
    except OSError as exc:
        try:
            temp_path.unlink()
        except FileNotFoundError:
            pass
        raise WriteError(f"cannot write {target_path}: {exc}", path=str(target_path)) from exc
    return target_path
