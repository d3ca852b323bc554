from __future__ import annotations

from typing import Dict, Iterable, Mapping, Tuple

import numpy as np

from .grid import AttemptRow, LetterStatus

DEFAULT_ALPHABET = "ABCDEFGHIJKLMNÑOPQRSTUVWXYZ"

ENTER_KEY = "ENTER"
DELETE_KEY = "DEL"

KEYBOARD_ROWS: Tuple[Tuple[str, ...], ...] = (
    tuple("QWERTYUIOP"),
    tuple("ASDFGHJKL"),
    (ENTER_KEY, *"ZXCVBNM", DELETE_KEY),
)


def aggregate_letter_statuses(rows: Iterable[AttemptRow]) -> Dict[str, LetterStatus]:
    """
    Best-known status of every evaluated letter, keyed by uppercase letter.

    A letter is only ever promoted: any first sighting is recorded, CORRECT
    always wins, and ELSEWHERE replaces ABSENT. Slots that have not been
    evaluated yet (still EMPTY) carry no information and are skipped.
    """
    statuses: Dict[str, LetterStatus] = {}
    for row in rows:
        for slot in row.slots:
            if slot.character is None or slot.status == LetterStatus.EMPTY:
                continue
            letter = slot.character.upper()
            known = statuses.get(letter)
            if (
                known is None
                or slot.status == LetterStatus.CORRECT
                or (slot.status == LetterStatus.ELSEWHERE and known == LetterStatus.ABSENT)
            ):
                statuses[letter] = slot.status
    return statuses


def letter_status_vector(
    statuses: Mapping[str, LetterStatus],
    alphabet: str = DEFAULT_ALPHABET,
) -> np.ndarray:
    """(len(alphabet),) uint8 codes, 0 for letters not seen yet."""
    out = np.zeros(len(alphabet), dtype=np.uint8)
    for idx, letter in enumerate(alphabet):
        out[idx] = int(statuses.get(letter, LetterStatus.EMPTY))
    return out
