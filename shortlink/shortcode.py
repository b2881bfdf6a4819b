"""Random short code generation."""

import secrets
import string
from typing import Optional


class ShortCodeGenerator:
    """Draw short codes uniformly from the base62 alphabet.

    Uses ``secrets`` rather than ``random`` so codes cannot be predicted
    from earlier ones. Uniqueness is the caller's concern (see
    ``CodeAssigner``).
    """

    BASE62_CHARS = string.ascii_letters + string.digits
    _ALPHABET = frozenset(BASE62_CHARS)

    def __init__(self, default_length: int = 6):
        if default_length < 1:
            raise ValueError("default_length must be positive")
        self.default_length = default_length

    def generate_random(self, length: Optional[int] = None) -> str:
        """Return a fresh code of ``length`` characters (default length if omitted)."""
        length = length or self.default_length
        return ''.join(secrets.choice(self.BASE62_CHARS) for _ in range(length))

    @classmethod
    def is_valid_format(cls, code: str) -> bool:
        """True if ``code`` is non-empty and uses only base62 characters."""
        return bool(code) and cls._ALPHABET.issuperset(code)
