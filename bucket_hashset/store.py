# ==================================================
# bucket_hashset/store.py
# ==================================================
import logging
import struct
from typing import Iterable, Iterator, Optional

import numpy as np

from .const import *

log = logging.getLogger(__name__)

_pack_prefix   = struct.Struct(PREFIX_FMT).pack
_unpack_prefix = struct.Struct(PREFIX_FMT).unpack_from


class InconsistentLengthError(ValueError):
    """Raised when a hash does not match the key size fixed for the set."""
    def __init__(self, expected: int, actual: int):
        super().__init__(f"inconsistent size: set holds {expected}-byte hashes, got {actual} bytes")
        self.expected = expected
        self.actual   = actual


# -- helpers -----------------------------------------------------------------
def _as_bytes(value) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        raise TypeError("hashes must be bytes-like, not str")
    if isinstance(value, np.ndarray):
        if value.ndim != 1 or value.dtype != np.uint8:
            raise TypeError("array hashes must be 1-D uint8")
        return value.tobytes()
    return bytes(memoryview(value))


def _lower_bound(bucket: bytearray, sub: bytes, width: int) -> int:
    """Index of the first payload in `bucket` that is >= `sub`."""
    lo, hi = 0, len(bucket) // width
    while lo < hi:
        mid = (lo + hi) // 2
        off = mid * width
        if bucket[off:off + width] < sub:
            lo = mid + 1
        else:
            hi = mid
    return lo

# ----------------------------------------------------------------------------

class HashSet:
    """Set of fixed-size binary hashes.

    Hashes are spread over 65536 buckets by their first two bytes (big-endian).
    Each bucket stores the remaining bytes of its hashes back to back in one
    ``bytearray``, sorted ascending, so lookups are a binary search and the
    per-entry overhead is nil.

    The key size is fixed by ``key_size`` or, failing that, by the first hash
    added; hashes of any other size are rejected with
    :class:`InconsistentLengthError`.

    Not thread-safe.
    """
    def __init__(self, key_size: Optional[int] = None, values: Optional[Iterable] = None):
        self._buckets: list = [None] * BUCKET_COUNT    # None = empty bucket
        self._size  = 0                                # key size, 0 until fixed
        self._width = 0                                # payload size
        self._count = 0

        if key_size is not None:
            self._fix_size(key_size)
        if values is not None:
            self.update(values)

    # ------------------------------------------------------------------
    def _fix_size(self, size: int):
        if isinstance(size, bool) or not isinstance(size, int):
            raise TypeError("key_size must be an int")
        if size < MIN_KEY_SIZE:
            raise ValueError(f"hashes need at least {MIN_KEY_SIZE} bytes, got {size}")
        self._size  = size
        self._width = size - PREFIX_SIZE
        log.debug("key size fixed at %d bytes", size)

    def _locate(self, h: bytes):
        return _unpack_prefix(h)[0], h[PREFIX_SIZE:]

    @property
    def key_size(self) -> int:
        """Size of every hash in the set; 0 while nothing has fixed it."""
        return self._size

    # ------------------------------------------------------------------
    def add(self, value) -> None:
        """Add a hash. Adding one that is already present is a no-op.

        This is the raw digest.  You *can* hex encode it, but that doubles
        the memory used per entry.
        """
        h = _as_bytes(value)
        if self._size == 0:
            self._fix_size(len(h))
        elif len(h) != self._size:
            log.debug("rejected %d-byte hash, set holds %d-byte hashes", len(h), self._size)
            raise InconsistentLengthError(self._size, len(h))

        n, sub = self._locate(h)
        bucket = self._buckets[n]
        if bucket is None:
            self._buckets[n] = bytearray(sub)
            self._count += 1
            return
        width = self._width
        if width == 0:                  # the prefix is the whole hash
            return

        off = _lower_bound(bucket, sub, width) * width
        if bucket[off:off + width] == sub:
            return
        bucket[off:off] = sub
        self._count += 1

    def update(self, values) -> None:
        """Add every hash from an iterable, or every row of a 2-D uint8 array."""
        if isinstance(values, (bytes, bytearray, memoryview, str)):
            raise TypeError("update() takes an iterable of hashes; use add() for one")
        if isinstance(values, np.ndarray):
            if values.ndim != 2 or values.dtype != np.uint8:
                raise TypeError("expected a 2-D uint8 array with one hash per row")
            values = (row.tobytes() for row in values)
        for v in values:
            self.add(v)

    # ------------------------------------------------------------------
    def contains(self, value) -> bool:
        """Return True if the given hash is in the set."""
        h = _as_bytes(value)
        if self._size == 0 or len(h) != self._size:
            return False
        n, sub = self._locate(h)
        bucket = self._buckets[n]
        if bucket is None:
            return False
        width = self._width
        if width == 0:
            return True
        off = _lower_bound(bucket, sub, width) * width
        return off < len(bucket) and bucket[off:off + width] == sub

    __contains__ = contains

    def __len__(self) -> int:
        return self._count

    def __bool__(self) -> bool:
        return self._count > 0

    def __iter__(self) -> Iterator[bytes]:
        """Hashes in ascending byte order."""
        width = self._width
        for n, bucket in enumerate(self._buckets):
            if bucket is None:
                continue
            prefix = _pack_prefix(n)
            if width == 0:
                yield prefix
                continue
            for off in range(0, len(bucket), width):
                yield prefix + bytes(bucket[off:off + width])

    def __repr__(self) -> str:
        return f"HashSet(key_size={self._size}, len={self._count})"

    # -- numpy views ---------------------------------------------------
    def bucket_sizes(self) -> np.ndarray:
        """Number of hashes held by each of the 65536 buckets."""
        sizes = np.zeros(BUCKET_COUNT, dtype=np.int64)
        width = self._width
        for n, bucket in enumerate(self._buckets):
            if bucket is not None:
                sizes[n] = len(bucket) // width if width else 1
        return sizes

    def to_array(self) -> np.ndarray:
        """All hashes as a (len, key_size) uint8 array, in iteration order."""
        if self._count == 0:
            return np.empty((0, self._size), dtype=np.uint8)
        raw = np.frombuffer(b"".join(self), dtype=np.uint8)
        return raw.reshape(self._count, self._size).copy()
