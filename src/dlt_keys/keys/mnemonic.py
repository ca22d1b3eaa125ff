"""
Mnemonic phrase container.

Word-list membership and checksums are validated by whoever produces the
phrase; this type only carries the normalized words and whether the phrase
uses the legacy 22-word scheme.
"""

from __future__ import annotations
import unicodedata
from typing import Callable, Iterable, Optional, Tuple

from ..runtime.errors import UnsupportedOperationError

LEGACY_WORD_COUNT = 22

# Maps a legacy phrase to a 32-byte private key seed
LegacyDeriver = Callable[["Mnemonic"], bytes]


class Mnemonic:
    """
    An ordered, immutable sequence of mnemonic words.

    Legacy phrases are turned into keys by an externally supplied
    ``legacy_deriver``; they never yield a chain code.
    """

    def __init__(self, words: Iterable[str], legacy: Optional[bool] = None,
                 legacy_deriver: Optional[LegacyDeriver] = None):
        """
        Args:
            words: Mnemonic words in order
            legacy: Whether this is a legacy phrase; inferred from the word count if None
            legacy_deriver: Callable producing the key seed of a legacy phrase
        """
        self._words: Tuple[str, ...] = tuple(
            unicodedata.normalize("NFKD", word.strip()).lower() for word in words
        )
        if not self._words or any(not word for word in self._words):
            raise ValueError("Mnemonic must contain at least one non-empty word")
        self._legacy = len(self._words) == LEGACY_WORD_COUNT if legacy is None else legacy
        self._legacy_deriver = legacy_deriver

    @classmethod
    def from_string(cls, phrase: str, **kwargs) -> Mnemonic:
        """Split a whitespace-separated phrase into words."""
        return cls(phrase.split(), **kwargs)

    @property
    def words(self) -> Tuple[str, ...]:
        return self._words

    @property
    def is_legacy(self) -> bool:
        return self._legacy

    def to_legacy_seed(self) -> bytes:
        """
        Run the legacy derivation scheme.

        Raises:
            UnsupportedOperationError: If no legacy deriver was supplied
        """
        if self._legacy_deriver is None:
            raise UnsupportedOperationError("legacy mnemonic derivation is not available")
        return self._legacy_deriver(self)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Mnemonic):
            return False
        return self._words == other._words and self._legacy == other._legacy

    def __hash__(self) -> int:
        return hash((self._words, self._legacy))

    def __len__(self) -> int:
        return len(self._words)

    def __str__(self) -> str:
        return " ".join(self._words)

    def __repr__(self) -> str:
        return f"Mnemonic(words={len(self._words)}, legacy={self._legacy})"


__all__ = [
    "LEGACY_WORD_COUNT",
    "Mnemonic",
]
