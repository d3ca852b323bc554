from __future__ import annotations

import asyncio
import functools
import logging
import time
from enum import Enum
from typing import Callable, List, Optional

from .api import ApiClient, Difficulty, RemoteWordValidator, translate_difficulties
from .config import ClientConfig
from .engine import GameEngine, GameOutcome, GameSession
from .errors import InvalidDimensionError, WordleClientError
from .preferences import SEEN_HELP_KEY, PreferenceStore

logger = logging.getLogger(__name__)

LOAD_DIFFICULTIES_FAILED = "No se pudieron cargar las dificultades."
SESSION_START_FAILED = "No se pudo iniciar la partida."


class Screen(str, Enum):
    LOADING = "loading"
    DIFFICULTY_SELECT = "difficulty_select"
    PLAYING = "playing"
    RESULT = "result"


class SessionController:
    """
    Owns session creation and teardown around a GameEngine and decides which
    screen the presentation layer shows.
    """

    def __init__(
        self,
        client: ApiClient,
        preferences: PreferenceStore,
        *,
        config: Optional[ClientConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.preferences = preferences
        self.config = config or ClientConfig()
        self._clock = clock

        self.screen = Screen.LOADING
        self.difficulties: List[Difficulty] = []
        self.session: Optional[GameSession] = None
        self.engine: Optional[GameEngine] = None
        self.difficulty_id: Optional[str] = None
        self.outcome = GameOutcome.IN_PROGRESS
        self.total_tries = 0
        self.show_help = not preferences.get(SEEN_HELP_KEY)

        self._error_message = ""
        self._error_expires_at = 0.0

    async def load_difficulties(self) -> List[Difficulty]:
        try:
            catalog = await asyncio.to_thread(self.client.fetch_difficulties)
        except WordleClientError:
            logger.warning("Could not load difficulties", exc_info=True)
            self.show_error(LOAD_DIFFICULTIES_FAILED)
            catalog = []
        self.difficulties = translate_difficulties(catalog)
        self.screen = Screen.DIFFICULTY_SELECT
        return self.difficulties

    async def start_game(self, difficulty_id: str) -> Optional[GameEngine]:
        engine = GameEngine(RemoteWordValidator(self.client))
        try:
            session = await asyncio.to_thread(self.client.start_session, difficulty_id)
            engine.initialize(session)
        except InvalidDimensionError:
            logger.warning("Session for difficulty %s has unusable dimensions", difficulty_id, exc_info=True)
            self.show_error(SESSION_START_FAILED)
            return None
        except WordleClientError as exc:
            logger.warning("Could not start a session for difficulty %s", difficulty_id, exc_info=True)
            self.show_error(exc.message)
            return None

        # Callbacks carry their engine so a game torn down by restart() stays silent.
        engine.on_game_end = functools.partial(self._on_game_end, engine)
        engine.on_error = functools.partial(self._on_engine_error, engine)
        self.session = session
        self.engine = engine
        self.difficulty_id = difficulty_id
        self.outcome = GameOutcome.IN_PROGRESS
        self.total_tries = 0
        self.screen = Screen.PLAYING
        logger.info("Started session %s (%d letters)", session.session_id, session.word_length)
        return engine

    def handle_game_end(self, won: bool, total_tries: int) -> None:
        self.outcome = GameOutcome.WON if won else GameOutcome.LOST
        self.total_tries = total_tries
        self.screen = Screen.RESULT

    def handle_engine_error(self, error: WordleClientError) -> None:
        self.show_error(error.message)

    def _on_game_end(self, engine: GameEngine, won: bool, total_tries: int) -> None:
        if engine is not self.engine:
            logger.debug("Ignoring game end from a discarded session")
            return
        self.handle_game_end(won, total_tries)

    def _on_engine_error(self, engine: GameEngine, error: WordleClientError) -> None:
        if engine is not self.engine:
            logger.debug("Ignoring error from a discarded session: %s", error)
            return
        self.handle_engine_error(error)

    def show_error(self, message: str) -> None:
        self._error_message = message
        self._error_expires_at = self._clock() + self.config.error_display_seconds

    def current_error(self) -> str:
        if self._error_message and self._clock() >= self._error_expires_at:
            self._error_message = ""
        return self._error_message

    def restart(self) -> None:
        self.session = None
        self.engine = None
        self.difficulty_id = None
        self.outcome = GameOutcome.IN_PROGRESS
        self.total_tries = 0
        self.screen = Screen.DIFFICULTY_SELECT

    def open_help(self) -> None:
        self.show_help = True

    def dismiss_help(self) -> None:
        self.show_help = False
        self.preferences.set(SEEN_HELP_KEY, True)
