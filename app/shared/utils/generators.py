"""Primary keys for agency records (CUID2 strings)."""

from cuid2 import Cuid

# 24 lowercase alphanumerics; safe in URLs and cache keys without escaping.
_ID_LENGTH = 24
_generator = Cuid(length=_ID_LENGTH)


def generate_cuid() -> str:
    """Return a new collision-resistant id for an agency, record, trigger or execution row."""
    return _generator.generate()
