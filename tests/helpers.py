from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence, Union

from wordle_client import GameEngine, LetterStatus, LetterVerdict

CODES = {
    "C": LetterStatus.CORRECT,
    "E": LetterStatus.ELSEWHERE,
    "A": LetterStatus.ABSENT,
}


def verdicts(word: str, marks: str) -> List[LetterVerdict]:
    """verdicts("casa", "CAAA") -> c correct, a/s/a absent."""
    return [LetterVerdict(letter=ch, status=CODES[m]) for ch, m in zip(word, marks)]


def type_word(engine: GameEngine, word: str) -> None:
    for ch in word:
        engine.insert_letter(ch)


Response = Union[Sequence[LetterVerdict], BaseException]


class FakeValidator:
    def __init__(self, responses: Optional[Sequence[Response]] = None) -> None:
        self.responses: List[Response] = list(responses or [])
        self.calls: List[tuple] = []
        self.gate: Optional[asyncio.Event] = None

    async def check_word(self, session_id: str, word: str) -> Sequence[LetterVerdict]:
        self.calls.append((session_id, word))
        if self.gate is not None:
            await self.gate.wait()
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response
