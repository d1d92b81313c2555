"""Sentence splitting and base-form tokenization for Japanese text."""
from typing import Any, Iterator, List, Optional

from .errors import InvalidInput

TERMINATORS = frozenset("。\n！？!?")
OPEN_QUOTES = frozenset("「『")
CLOSE_QUOTES = frozenset("」』")

# UniDic part-of-speech tags that never carry vocabulary
SKIPPED_POS = frozenset({"補助記号", "空白", "記号"})

_tagger: Optional[Any] = None


def iter_sentences(text: str) -> Iterator[str]:
    """Yield trimmed sentences from ``text``.

    Terminators inside an open quotation do not end a sentence. A trailing
    fragment with no terminator is still yielded.
    """
    depth = 0
    current: List[str] = []
    for c in text:
        current.append(c)
        if c in OPEN_QUOTES:
            depth += 1
        elif c in CLOSE_QUOTES:
            depth = max(depth - 1, 0)
        elif depth == 0 and c in TERMINATORS:
            sentence = "".join(current).strip()
            if sentence:
                yield sentence
            current = []

    tail = "".join(current).strip()
    if tail:
        yield tail


def _get_tagger() -> Any:
    global _tagger
    if _tagger is None:
        import fugashi
        _tagger = fugashi.Tagger()
    return _tagger


def _base_form(word: Any) -> Optional[str]:
    feature = word.feature
    if getattr(feature, "pos1", None) in SKIPPED_POS:
        return None
    lemma = getattr(feature, "lemma", None)
    if not lemma or lemma == "*":
        # Unknown to the dictionary; the surface is the best key we have
        return word.surface.strip() or None
    # Loanword lemmas carry the source word, e.g. "コーヒー-coffee"
    if "-" in lemma:
        head = lemma.split("-", 1)[0]
        if head:
            lemma = head
    return lemma


def tokenize(sentence: str) -> List[str]:
    """Return the base form of every content token in ``sentence``.

    Raises InvalidInput when nothing usable comes out of the tagger.
    """
    tagger = _get_tagger()
    words: List[str] = []
    for word in tagger(sentence):
        base = _base_form(word)
        if base:
            words.append(base)
    if not words:
        raise InvalidInput(f"No words found in sentence: {sentence!r}")
    return words
