from .timeutils import utcnow, to_naive_utc, isoformat

__all__ = [
    "utcnow",
    "to_naive_utc",
    "isoformat",
]
