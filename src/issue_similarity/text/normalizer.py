"""Phrase rewriting, tokenization, synonym folding and stopword removal."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from issue_similarity.text.lexicon import PHRASE_MAP, STOPWORDS, SYNONYMS

_SPLIT_PATTERN = re.compile(r"[^A-Za-z0-9_]+")


def _phrase_key(phrase: str) -> str:
    return " ".join(phrase.split()).lower()


class TextNormalizer:
    """Converts raw field text into a canonical token sequence.

    The phrase map is compiled once into a single case-insensitive alternation
    bounded by ASCII word boundaries. The regex engine tries alternatives in
    map order at each position, so a single left-to-right pass gives
    first-listed-wins semantics for overlapping phrases.
    """

    def __init__(
        self,
        phrase_map: Mapping[str, str] | None = None,
        synonyms: Mapping[str, str] | None = None,
        stopwords: Iterable[str] | None = None,
    ) -> None:
        phrases = PHRASE_MAP if phrase_map is None else phrase_map
        self._replacements: dict[str, str] = {}
        for phrase, replacement in phrases.items():
            key = _phrase_key(phrase)
            if key:
                self._replacements.setdefault(key, replacement)
        self._phrase_pattern = self._compile(list(self._replacements))
        self._synonyms = dict(SYNONYMS if synonyms is None else synonyms)
        self._stopwords = frozenset(STOPWORDS if stopwords is None else stopwords)

    def normalize(self, text: str | None) -> list[str]:
        if not text:
            return []
        rewritten = self.rewrite_phrases(text).lower()
        tokens: list[str] = []
        for raw in _SPLIT_PATTERN.split(rewritten):
            if not raw:
                continue
            token = self._synonyms.get(raw, raw)
            if token in self._stopwords:
                continue
            tokens.append(token)
        return tokens

    def rewrite_phrases(self, text: str) -> str:
        if self._phrase_pattern is None:
            return text
        return self._phrase_pattern.sub(self._replace, text)

    def _replace(self, match: re.Match[str]) -> str:
        return self._replacements[_phrase_key(match.group(0))]

    @staticmethod
    def _compile(phrases: list[str]) -> re.Pattern[str] | None:
        if not phrases:
            return None
        alternatives = [r"\s+".join(re.escape(word) for word in phrase.split()) for phrase in phrases]
        return re.compile(
            r"\b(?:" + "|".join(alternatives) + r")\b",
            flags=re.IGNORECASE | re.ASCII,
        )


_default_normalizer: TextNormalizer | None = None


def normalize(text: str | None) -> list[str]:
    """Normalize with the shipped dictionaries."""
    global _default_normalizer
    if _default_normalizer is None:
        _default_normalizer = TextNormalizer()
    return _default_normalizer.normalize(text)
