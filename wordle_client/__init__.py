"""Client-side engine for a Wordle-style word guessing game."""

from .api import ApiClient, Difficulty, RemoteWordValidator, translate_difficulties
from .config import ClientConfig, configure_logging
from .controls import InputAction, InputDispatcher, KeyEventHub, KeyPress
from .engine import GameEngine, GameOutcome, GameSession, SubmitResult, WordValidator
from .errors import (
    IncompleteAttemptError,
    InvalidDimensionError,
    InvalidWordError,
    SessionNotFoundError,
    UnexpectedValidatorError,
    ValidatorError,
    WordleClientError,
    error_for_status,
)
from .grid import AttemptGrid, AttemptRow, LetterSlot, LetterStatus, LetterVerdict
from .keyboard import KEYBOARD_ROWS, aggregate_letter_statuses, letter_status_vector
from .lifecycle import Screen, SessionController
from .preferences import JsonPreferenceStore, MemoryPreferenceStore, PreferenceStore

__all__ = [
    "ApiClient",
    "Difficulty",
    "RemoteWordValidator",
    "translate_difficulties",
    "ClientConfig",
    "configure_logging",
    "InputAction",
    "InputDispatcher",
    "KeyEventHub",
    "KeyPress",
    "GameEngine",
    "GameOutcome",
    "GameSession",
    "SubmitResult",
    "WordValidator",
    "IncompleteAttemptError",
    "InvalidDimensionError",
    "InvalidWordError",
    "SessionNotFoundError",
    "UnexpectedValidatorError",
    "ValidatorError",
    "WordleClientError",
    "error_for_status",
    "AttemptGrid",
    "AttemptRow",
    "LetterSlot",
    "LetterStatus",
    "LetterVerdict",
    "KEYBOARD_ROWS",
    "aggregate_letter_statuses",
    "letter_status_vector",
    "Screen",
    "SessionController",
    "JsonPreferenceStore",
    "MemoryPreferenceStore",
    "PreferenceStore",
]
