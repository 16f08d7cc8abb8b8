"""Pure functions for cutting finalized speech into short display fragments."""

from __future__ import annotations

import re

MAX_CHARS_PER_FRAGMENT = 15
MIN_SPLIT_INDEX = 5

_SENTENCE_RE = re.compile(r'[^.!?]+[.!?]\s*|[^.!?]+$')


def split_sentences(chunk: str) -> list[str]:
    """Split on terminal punctuation, keeping it with the preceding text."""
    sentences = _SENTENCE_RE.findall(chunk)
    return sentences or [chunk]


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def split_long(sentence: str, max_chars: int = MAX_CHARS_PER_FRAGMENT, min_split: int = MIN_SPLIT_INDEX) -> list[str]:
    """Cut *sentence* into pieces of at most *max_chars*.

    Prefers the last space at or before *max_chars*; falls back to a hard cut
    at *max_chars* when there is no space or it sits before *min_split*.
    """
    pieces: list[str] = []
    rest = sentence.strip()
    while len(rest) > max_chars:
        cut = rest.rfind(' ', 0, max_chars + 1)
        if cut < min_split:
            cut = max_chars
        head = rest[:cut].strip()
        if head:
            pieces.append(head)
        rest = rest[cut:].strip()
    if rest:
        pieces.append(rest)
    return pieces


def segment_chunk(
    chunk: str,
    max_chars: int = MAX_CHARS_PER_FRAGMENT,
    min_split: int = MIN_SPLIT_INDEX,
) -> list[str]:
    """Turn one finalized chunk into ordered, capitalized, non-empty fragments."""
    chunk = chunk.strip()
    if not chunk:
        return []
    fragments: list[str] = []
    for sentence in split_sentences(chunk):
        for piece in split_long(sentence, max_chars, min_split):
            fragments.append(capitalize_first(piece))
    return fragments
