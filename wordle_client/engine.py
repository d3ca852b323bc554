from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Union

from .errors import (
    IncompleteAttemptError,
    UnexpectedValidatorError,
    ValidatorError,
    WordleClientError,
)
from .grid import AttemptGrid, AttemptRow, LetterSlot, LetterStatus, LetterVerdict, slots_from_verdicts
from .keyboard import aggregate_letter_statuses

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 6


class GameOutcome(str, Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self != GameOutcome.IN_PROGRESS


class WordValidator(Protocol):
    async def check_word(self, session_id: str, word: str) -> Sequence[LetterVerdict]:
        ...


@dataclass(frozen=True)
class GameSession:
    session_id: str
    word_length: int
    difficulty: Optional[str] = None
    max_attempts: int = DEFAULT_MAX_ATTEMPTS


@dataclass(frozen=True)
class SubmitResult:
    """
    The single terminal signal of one accepted `submit_attempt` call.

    Exactly one of `verdicts` (the row was scored) or `error` is set.
    """

    outcome: GameOutcome
    row: int
    verdicts: Optional[List[LetterVerdict]] = None
    error: Optional[WordleClientError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class GameEngine:
    """
    Session state machine: owns the attempt grid and the current-row cursor.

    Uninitialized -> Active(row=0) -> Active(row=k) -> Won | Lost.
    Won and Lost are terminal until the next `initialize()`.

    Callbacks:
    - on_game_end(won, total_tries) fires once when a terminal outcome is reached.
    - on_error(error) fires once per failed submission.
    """

    def __init__(
        self,
        validator: WordValidator,
        *,
        on_game_end: Optional[Callable[[bool, int], None]] = None,
        on_error: Optional[Callable[[WordleClientError], None]] = None,
    ) -> None:
        self._validator = validator
        self.on_game_end = on_game_end
        self.on_error = on_error

        self._session: Optional[GameSession] = None
        self._grid: Optional[AttemptGrid] = None
        self._current_row = 0
        self._submitting = False
        self._outcome = GameOutcome.IN_PROGRESS

    @property
    def session(self) -> Optional[GameSession]:
        return self._session

    @property
    def grid(self) -> AttemptGrid:
        if self._grid is None:
            raise RuntimeError("Engine has no grid. Call initialize() first.")
        return self._grid

    @property
    def initialized(self) -> bool:
        return self._grid is not None

    @property
    def current_row(self) -> int:
        return self._current_row

    @property
    def outcome(self) -> GameOutcome:
        return self._outcome

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def max_attempts(self) -> int:
        return self.grid.max_attempts

    @property
    def input_disabled(self) -> bool:
        if self._grid is None or self._submitting or self._outcome.is_terminal:
            return True
        return self._current_row >= self._grid.max_attempts

    def initialize(
        self,
        session: Union[GameSession, str],
        word_length: Optional[int] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> AttemptGrid:
        """
        Start a fresh play-through. Accepts a GameSession, or a session id plus
        explicit dimensions. Always replaces the grid wholesale.
        """
        if not isinstance(session, GameSession):
            if word_length is None:
                raise ValueError("word_length is required when no GameSession is given.")
            session = GameSession(
                session_id=str(session),
                word_length=word_length,
                max_attempts=max_attempts,
            )

        grid = AttemptGrid.create(session.word_length, session.max_attempts)
        self._session = session
        self._grid = grid
        self._current_row = 0
        self._submitting = False
        self._outcome = GameOutcome.IN_PROGRESS
        logger.debug(
            "Initialized session %s: %d letters x %d attempts",
            session.session_id,
            grid.word_length,
            grid.max_attempts,
        )
        return grid

    def letter_statuses(self) -> Dict[str, LetterStatus]:
        if self._grid is None:
            return {}
        return aggregate_letter_statuses(self._grid.rows)

    def insert_letter(self, ch: str) -> bool:
        letter = ch.upper() if isinstance(ch, str) else ""
        if len(letter) != 1 or not letter.isalpha():
            return False
        row = self._editable_row()
        if row is None:
            return False
        idx = row.first_empty_index()
        if idx is None:
            return False
        row.slots[idx] = LetterSlot(character=letter, status=LetterStatus.EMPTY)
        return True

    def delete_letter(self) -> bool:
        row = self._editable_row()
        if row is None:
            return False
        idx = row.last_filled_index()
        if idx is None:
            return False
        row.slots[idx] = LetterSlot.empty()
        return True

    async def submit_attempt(self) -> Optional[SubmitResult]:
        """
        Score the current row with the validator.

        Returns None when the call is dropped (not initialized, game over, or a
        submission already in flight). Otherwise returns exactly one result,
        mirrored by exactly one callback once the in-flight flag is released.
        """
        if self.input_disabled:
            return None

        session = self._session
        if session is None:
            return None
        grid = self.grid
        row_index = self._current_row
        row = grid.rows[row_index]

        if not row.is_full:
            return self._emit(self._failure(row_index, IncompleteAttemptError()))

        self._submitting = True
        try:
            result = await self._check_row(session, grid, row_index, row.word.lower())
        finally:
            if self._grid is grid:
                self._submitting = False

        if self._grid is not grid:
            # initialize() ran while the validator was busy; that game is gone.
            logger.debug("Discarding result for replaced session %s", session.session_id)
            return None
        return self._emit(result)

    async def _check_row(
        self,
        session: GameSession,
        grid: AttemptGrid,
        row_index: int,
        word: str,
    ) -> SubmitResult:
        logger.debug("Submitting %r for session %s (row %d)", word, session.session_id, row_index)
        try:
            verdicts = list(await self._validator.check_word(session.session_id, word))
        except ValidatorError as exc:
            logger.info("Validator rejected %r: %s", word, exc)
            return self._failure(row_index, exc)
        except Exception as exc:
            logger.warning("Validator call failed for %r", word, exc_info=True)
            error = UnexpectedValidatorError()
            error.__cause__ = exc
            return self._failure(row_index, error)

        if len(verdicts) != grid.word_length:
            logger.warning(
                "Validator returned %d verdicts for a %d-letter word",
                len(verdicts),
                grid.word_length,
            )
            return self._failure(row_index, UnexpectedValidatorError())

        if self._grid is not grid:
            return self._failure(row_index, UnexpectedValidatorError())
        return self._apply_verdicts(row_index, verdicts)

    def _editable_row(self) -> Optional[AttemptRow]:
        if self.input_disabled:
            return None
        return self.grid.rows[self._current_row]

    def _apply_verdicts(self, row_index: int, verdicts: List[LetterVerdict]) -> SubmitResult:
        grid = self.grid
        grid.rows[row_index] = AttemptRow(slots=slots_from_verdicts(verdicts), submitted=True)

        won = all(v.status == LetterStatus.CORRECT for v in verdicts)
        if won:
            self._outcome = GameOutcome.WON
        elif row_index + 1 >= grid.max_attempts:
            self._outcome = GameOutcome.LOST
        else:
            self._current_row = row_index + 1
        return SubmitResult(outcome=self._outcome, row=row_index, verdicts=verdicts)

    def _failure(self, row_index: int, error: WordleClientError) -> SubmitResult:
        return SubmitResult(outcome=self._outcome, row=row_index, error=error)

    def _emit(self, result: SubmitResult) -> SubmitResult:
        if result.error is not None:
            if self.on_error is not None:
                self.on_error(result.error)
        elif result.outcome.is_terminal:
            tries = result.row + 1
            logger.info("Game over: %s after %d attempt(s)", result.outcome.value, tries)
            if self.on_game_end is not None:
                self.on_game_end(result.outcome == GameOutcome.WON, tries)
        return result
