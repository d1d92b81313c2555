import os
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Union

# Rank given to words missing from the list. Fits a signed 64-bit SQLite INTEGER.
MAX_COST: int = 2**63 - 1

BUNDLED_LIST = Path(__file__).parent / "data" / "japanese_word_frequency.txt"
FREQ_LIST_PATH: str = os.environ.get("LLM_JP_KG_FREQ_LIST", str(BUNDLED_LIST))


class FrequencyOracle:
    """Read-only map from a base-form word to its zero-based frequency rank.

    Lower ranks are more frequent. Words that are not on the list cost
    ``MAX_COST``, which is strictly greater than any real rank.
    """

    def __init__(self, ranks: Mapping[str, int]) -> None:
        self._ranks: Dict[str, int] = dict(ranks)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "FrequencyOracle":
        ranks: Dict[str, int] = {}
        for index, line in enumerate(lines):
            word = line.strip()
            # A word listed twice keeps its more frequent position
            if word and word not in ranks:
                ranks[word] = index
        return cls(ranks)

    @classmethod
    def from_file(cls, path: Optional[Union[str, Path]] = None) -> "FrequencyOracle":
        with open(path or FREQ_LIST_PATH, "r", encoding="utf-8-sig") as f:
            return cls.from_lines(f.read().splitlines())

    def rank(self, word: str) -> int:
        return self._ranks.get(word, MAX_COST)

    def __contains__(self, word: object) -> bool:
        return word in self._ranks

    def __len__(self) -> int:
        return len(self._ranks)
