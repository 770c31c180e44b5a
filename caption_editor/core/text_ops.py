"""Pure text transforms applied by the caption store.

WHY: Punctuation cleanup, find/replace, profanity masking, and word-level
splitting are string logic with exact, golden-tested behaviour. Keeping
them as pure functions lets tests pin down every quirk without building a
store, and keeps the store focused on history and bookkeeping.

HOW: Each function takes a string (plus options) and returns a new string.
No function looks at timing or style.

RULES:
- auto_punctuate_text() applies its three cleanups exactly once each, in
  order, never to a fixpoint ("a   b" keeps one double space)
- find_replace_text() inserts the literal replacement, never a case-adapted one
- profanity_filter_text() only knows lowercase and leading-capital variants
  of each listed word, and matches substrings (so "class" loses its "ass")
- split_words_at_ratio() splits on whitespace and rounds the word index down
"""

from __future__ import annotations

import re
from typing import Iterable, Tuple

from caption_editor.config import BLEEP_TOKEN, PROFANITY_WORDS


def auto_punctuate_text(text: str) -> str:
    """Capitalize, terminate with a period, and fix common spacing mistakes.

    Examples:
        "hello , world" -> "Hello, world."
        "" -> "."
    """
    if text and text[0].islower():
        text = text[0].upper() + text[1:]

    if not text.endswith((".", "?", "!")):
        text += "."

    text = text.replace(" ,", ",")
    text = text.replace(" .", ".")
    text = text.replace("  ", " ")
    return text


def find_replace_text(text: str, find: str, replace: str, case_sensitive: bool) -> str:
    """Replace every non-overlapping occurrence of ``find`` with ``replace``.

    Matches are scanned left to right. In case-insensitive mode the match
    ignores case but the inserted text is ``replace`` verbatim.
    """
    if case_sensitive:
        return text.replace(find, replace)
    return re.sub(re.escape(find), lambda _m: replace, text, flags=re.IGNORECASE)


def _capitalized(word: str) -> str:
    return word[:1].upper() + word[1:]


def profanity_filter_text(
    text: str,
    bleep: bool,
    words: Iterable[str] = PROFANITY_WORDS,
) -> str:
    """Mask listed words with ``[bleep]`` or with asterisks of the same length.

    Each word is handled once, in list order: first its lowercase form,
    then its leading-capital form. ALL-CAPS or mixed-case spellings are
    left untouched.
    """
    for word in words:
        replacement = BLEEP_TOKEN if bleep else "*" * len(word)
        text = text.replace(word, replacement)
        text = text.replace(_capitalized(word), replacement)
    return text


def split_words_at_ratio(text: str, ratio: float) -> Tuple[str, str]:
    """Split ``text`` into two halves at a fraction of its word count.

    The word index is ``floor(word_count * ratio)``; both halves are
    re-joined with single spaces, so either half may be empty.
    """
    words = text.split()
    index = int(len(words) * ratio)
    return " ".join(words[:index]), " ".join(words[index:])
