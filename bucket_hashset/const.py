# ==================================================
# bucket_hashset/const.py
# ==================================================
PREFIX_SIZE  = 2             # leading bytes that select the bucket
PREFIX_FMT   = ">H"          # big-endian uint16
BUCKET_COUNT = 1 << 16       # one bucket per possible prefix
MIN_KEY_SIZE = PREFIX_SIZE
