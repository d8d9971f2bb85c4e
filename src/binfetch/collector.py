"""
Buffered stream collector.

Drains an incoming byte stream into one contiguous buffer. When the transport
declares a trustworthy total length the whole body is written into a single
region reserved up front, so an accurate Content-Length costs no extra copies.
Without a usable hint, fragments are kept as-is and joined exactly once at the
end (or not at all when only one fragment ever arrives).

If the hint turns out to be too small the reserved region is abandoned for the
rest of the collection: its written prefix becomes the first fragment and every
later fragment is appended to the fragment list.
"""
from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from typing import AsyncIterable, Iterable, List, Optional, Union

from .errors import StreamError

__all__ = [
    "MAX_RESERVE",
    "BodyCollector",
    "CompletedBuffer",
    "collect",
    "acollect",
    "parse_size_hint",
]

# Largest region we are willing to reserve from a size hint
MAX_RESERVE = sys.maxsize

# What a finished collection hands to the extractor
CompletedBuffer = Union[bytes, bytearray, memoryview]

Fragment = Union[bytes, bytearray, memoryview]


def parse_size_hint(value: object) -> Optional[int]:
    """
    Turn a declared length (usually a Content-Length header) into a trusted hint.

    Returns None unless the value is a positive integer not larger than
    MAX_RESERVE. Numeric strings are accepted; integral floats ("7.0", "1e3")
    count as integers.

    Examples:
        >>> parse_size_hint("1024")
        1024
        >>> parse_size_hint("abc") is None
        True
        >>> parse_size_hint(0) is None
        True
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, bytes):
        try:
            value = value.decode("ascii")
        except UnicodeDecodeError:
            return None

    if isinstance(value, int):
        n = value
    elif isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return None
        n = int(value)
    elif isinstance(value, str):
        text = value.strip()
        try:
            n = int(text)
        except ValueError:
            try:
                as_float = float(text)
            except ValueError:
                return None
            if not math.isfinite(as_float) or not as_float.is_integer():
                return None
            n = int(as_float)
    else:
        return None

    if 0 < n <= MAX_RESERVE:
        return n
    return None


@dataclass
class _Reserved:
    """Region allocated from the size hint."""
    buf: bytearray
    capacity: int
    written: int = 0


@dataclass
class _Fallback:
    """Owned fragments, joined once on finish."""
    fragments: List[Fragment] = field(default_factory=list)


class BodyCollector:
    """
    Accumulates fragments into a single buffer.

    Exactly one of the two states is active at any time: a reserved region
    (trusted hint, no overflow seen yet) or a fragment list. The switch from
    reserved to fragments happens in one place, `_abandon_region`, and is
    one-way.

    The collector owns its state for the lifetime of one collection and is not
    meant to be shared between threads or reused after `finish()`.
    """

    def __init__(self, size_hint: object = None, *, encoding: Optional[str] = None) -> None:
        self.encoding = encoding
        self.size_hint = parse_size_hint(size_hint)
        self.received = 0
        self._state: Union[_Reserved, _Fallback, None] = self._initial_state(self.size_hint)

    @staticmethod
    def _initial_state(hint: Optional[int]) -> Union[_Reserved, _Fallback]:
        if hint is None:
            return _Fallback()
        try:
            return _Reserved(buf=bytearray(hint), capacity=hint)
        except MemoryError:
            # Hint is numerically valid but the allocation is not possible
            return _Fallback()

    @property
    def reserved(self) -> bool:
        """True while the body is still being written into the reserved region."""
        return isinstance(self._state, _Reserved)

    def _coerce(self, fragment: object) -> Optional[Fragment]:
        if isinstance(fragment, str):
            return fragment.encode(self.encoding or "utf-8")
        if isinstance(fragment, (bytes, bytearray)):
            return fragment
        if isinstance(fragment, memoryview):
            if fragment.ndim == 1 and fragment.itemsize == 1:
                return fragment
            return fragment.cast("B")
        return None

    def feed(self, fragment: object) -> None:
        """
        Accept one fragment from the stream.

        Text is encoded with the declared encoding; anything that is not
        bytes-like carries no payload and is dropped.
        """
        state = self._state
        if state is None:
            raise RuntimeError("collector already finished or released")

        chunk = self._coerce(fragment)
        if chunk is None:
            return
        size = len(chunk)
        self.received += size

        if isinstance(state, _Reserved):
            new_len = state.written + size
            if new_len <= state.capacity:
                state.buf[state.written:new_len] = chunk
                state.written = new_len
                return
            state = self._abandon_region(state)

        if size:
            state.fragments.append(chunk)

    def _abandon_region(self, region: _Reserved) -> _Fallback:
        # The hint understated the body; keep what was written as the first fragment
        fallback = _Fallback()
        if region.written:
            fallback.fragments.append(memoryview(region.buf)[:region.written])
        self._state = fallback
        return fallback

    def finish(self) -> CompletedBuffer:
        """
        Produce the completed buffer.

        A body shorter than the hint yields just the written prefix. A single
        fragment is returned as the very same object.
        """
        state = self._state
        if state is None:
            raise RuntimeError("collector already finished or released")
        self._state = None

        if isinstance(state, _Reserved):
            return memoryview(state.buf)[:state.written].toreadonly()

        if len(state.fragments) == 1:
            return state.fragments[0]
        return b"".join(state.fragments)

    def release(self) -> None:
        """Drop any partially collected data."""
        self._state = None


def collect(stream: Iterable[object], size_hint: object = None,
            encoding: Optional[str] = None) -> CompletedBuffer:
    """
    Drain a synchronous stream into one buffer.

    Args:
        stream: Iterable yielding byte (or text) fragments in order
        size_hint: Declared total length, e.g. a Content-Length header value
        encoding: Encoding used for text fragments

    Returns:
        The completed buffer (empty for a zero-length stream)

    Raises:
        StreamError: If the stream raises at any point; no partial result is kept
    """
    collector = BodyCollector(size_hint, encoding=encoding)
    try:
        for fragment in stream:
            collector.feed(fragment)
    except StreamError:
        collector.release()
        raise
    except Exception as exc:
        collector.release()
        raise StreamError(f"stream failed after {collector.received} bytes: {exc}") from exc
    return collector.finish()


async def acollect(stream: AsyncIterable[object], size_hint: object = None,
                   encoding: Optional[str] = None) -> CompletedBuffer:
    """Async counterpart of `collect` for async iterables."""
    collector = BodyCollector(size_hint, encoding=encoding)
    try:
        async for fragment in stream:
            collector.feed(fragment)
    except StreamError:
        collector.release()
        raise
    except Exception as exc:
        collector.release()
        raise StreamError(f"stream failed after {collector.received} bytes: {exc}") from exc
    except BaseException:
        # Cancellation propagates untouched
        collector.release()
        raise
    return collector.finish()
