import re
from dataclasses import dataclass, field
from typing import List

_NON_WORD = re.compile(r"[^a-z0-9\s]")


@dataclass
class ContentFilter:
    """Word filter for element names. The word list ships empty."""

    bad_words: List[str] = field(default_factory=list)

    @staticmethod
    def sanitize(text: str) -> str:
        """Lower-case the text and drop everything but letters, digits and spaces."""
        return _NON_WORD.sub("", text.lower()).strip()

    def is_allowed(self, name: str) -> bool:
        words = self.sanitize(name).split()
        return not any(word in self.bad_words for word in words)
