import hashlib
import struct

import pytest

from bucket_hashset import HashSet


@pytest.fixture
def hs():
    """An empty set; key size is fixed by whatever the test adds first."""
    return HashSet()


@pytest.fixture
def digests():
    """Factory for `n` distinct 16-byte BLAKE2b digests."""
    def make(n, digest_size=16, start=0):
        pack = struct.Struct("<Q").pack
        return [hashlib.blake2b(pack(i), digest_size=digest_size).digest()
                for i in range(start, start + n)]
    return make
