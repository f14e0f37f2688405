from .store import HashSet, InconsistentLengthError
__all__ = ["HashSet", "InconsistentLengthError"]
