# ==================================================
# examples/build_set.py
# ==================================================
import argparse, hashlib, logging, struct
from bucket_hashset import HashSet

log = logging.getLogger("build_set")


def digests(start: int, stop: int, digest_size: int):
    pack = struct.Struct("<Q").pack
    for i in range(start, stop):
        yield hashlib.blake2b(pack(i), digest_size=digest_size).digest()


def build(count: int, digest_size: int = 20, probes: int = 1000) -> dict:
    hs = HashSet(key_size=digest_size)
    hs.update(digests(0, count, digest_size))
    log.info("added %d hashes, %d distinct", count, len(hs))

    found  = sum(h in hs for h in digests(0, count, digest_size))
    misses = sum(h not in hs for h in digests(count, count + probes, digest_size))
    sizes  = hs.bucket_sizes()
    return {
        "len":         len(hs),
        "found":       found,
        "misses":      misses,
        "probes":      probes,
        "buckets":     int((sizes > 0).sum()),
        "max_bucket":  int(sizes.max()),
    }


def main(argv=None):
    p = argparse.ArgumentParser(description="fill a HashSet with BLAKE2b digests")
    p.add_argument("count", type=int)
    p.add_argument("--digest-size", type=int, default=20)
    p.add_argument("--probes", type=int, default=1000, help="absent hashes to look up")
    p.add_argument("--log-level", default="INFO")
    args = p.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper()),
                        format="%(asctime)s - %(levelname)s - %(message)s")

    r = build(args.count, args.digest_size, args.probes)
    print(f"len={r['len']} found={r['found']} misses={r['misses']}/{r['probes']} "
          f"buckets={r['buckets']} max_bucket={r['max_bucket']}")
    return 0 if r["found"] == args.count and r["misses"] == r["probes"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
