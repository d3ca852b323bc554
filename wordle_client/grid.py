from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .errors import InvalidDimensionError


class LetterStatus(IntEnum):
    """
    Per-letter verdict. The integer order is the informativeness order used
    when summarizing the keyboard: CORRECT > ELSEWHERE > ABSENT > EMPTY.
    """

    EMPTY = 0
    ABSENT = 1
    ELSEWHERE = 2
    CORRECT = 3

    @property
    def wire(self) -> str:
        return self.name.lower()

    @classmethod
    def from_wire(cls, value: str) -> "LetterStatus":
        clean = str(value).strip().upper()
        if clean not in cls.__members__ or clean == "EMPTY":
            raise ValueError(f"Unknown letter status: {value!r}")
        return cls[clean]


@dataclass(frozen=True)
class LetterVerdict:
    """One entry of the validator's answer: a letter and where it belongs."""

    letter: str
    status: LetterStatus


@dataclass(frozen=True)
class LetterSlot:
    character: Optional[str] = None
    status: LetterStatus = LetterStatus.EMPTY

    @classmethod
    def empty(cls) -> "LetterSlot":
        return cls()

    @property
    def is_filled(self) -> bool:
        return self.character is not None


@dataclass
class AttemptRow:
    slots: List[LetterSlot]
    submitted: bool = False

    @classmethod
    def blank(cls, word_length: int) -> "AttemptRow":
        return cls(slots=[LetterSlot.empty() for _ in range(word_length)])

    def __len__(self) -> int:
        return len(self.slots)

    @property
    def word(self) -> str:
        return "".join(slot.character or "" for slot in self.slots)

    @property
    def is_full(self) -> bool:
        return all(slot.is_filled for slot in self.slots)

    @property
    def is_blank(self) -> bool:
        return not any(slot.is_filled for slot in self.slots)

    def first_empty_index(self) -> Optional[int]:
        for idx, slot in enumerate(self.slots):
            if not slot.is_filled:
                return idx
        return None

    def last_filled_index(self) -> Optional[int]:
        for idx in range(len(self.slots) - 1, -1, -1):
            if self.slots[idx].is_filled:
                return idx
        return None


@dataclass
class AttemptGrid:
    """
    Fixed-shape matrix of attempts: `max_attempts` rows of `word_length` slots.

    Only the game engine mutates a grid; everything else reads it.
    """

    word_length: int
    max_attempts: int
    rows: List[AttemptRow] = field(default_factory=list)

    @classmethod
    def create(cls, word_length: int, max_attempts: int) -> "AttemptGrid":
        if word_length <= 0:
            raise InvalidDimensionError("word_length must be >= 1")
        if max_attempts <= 0:
            raise InvalidDimensionError("max_attempts must be >= 1")
        rows = [AttemptRow.blank(word_length) for _ in range(max_attempts)]
        return cls(word_length=int(word_length), max_attempts=int(max_attempts), rows=rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __getitem__(self, index: int) -> AttemptRow:
        return self.rows[index]

    def __iter__(self):
        return iter(self.rows)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.max_attempts, self.word_length

    def submitted_rows(self) -> List[AttemptRow]:
        return [row for row in self.rows if row.submitted]

    def status_codes(self) -> np.ndarray:
        """Status matrix, shape (max_attempts, word_length), uint8 LetterStatus codes."""
        codes = np.zeros(self.shape, dtype=np.uint8)
        for r, row in enumerate(self.rows):
            codes[r] = [int(slot.status) for slot in row.slots]
        return codes

    def letters(self) -> List[List[str]]:
        return [[slot.character or "" for slot in row.slots] for row in self.rows]

    def render(self) -> str:
        tokens = {
            LetterStatus.ABSENT: "⬛",
            LetterStatus.ELSEWHERE: "🟨",
            LetterStatus.CORRECT: "🟩",
        }
        lines: List[str] = []
        for row in self.submitted_rows():
            marks = "".join(tokens.get(slot.status, "⬜") for slot in row.slots)
            lines.append(f"{row.word} {marks}")
        return "\n".join(lines)


def slots_from_verdicts(verdicts: Sequence[LetterVerdict]) -> List[LetterSlot]:
    return [LetterSlot(character=v.letter.upper(), status=v.status) for v in verdicts]
