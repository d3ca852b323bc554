import asyncio
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import requests

from helpers import FakeValidator, type_word, verdicts

from wordle_client import (
    ApiClient,
    ClientConfig,
    Difficulty,
    GameOutcome,
    GameSession,
    InvalidWordError,
    JsonPreferenceStore,
    MemoryPreferenceStore,
    Screen,
    SessionController,
    SessionNotFoundError,
    UnexpectedValidatorError,
)
from wordle_client.lifecycle import LOAD_DIFFICULTIES_FAILED, SESSION_START_FAILED
from wordle_client.preferences import SEEN_HELP_KEY


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def make_client() -> mock.Mock:
    client = mock.Mock(spec=ApiClient)
    client.fetch_difficulties.return_value = [Difficulty("1", "Easy"), Difficulty("2", "Expert")]
    client.start_session.return_value = GameSession(session_id="abc", word_length=4, difficulty="Easy")
    return client


class SessionControllerTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.client = make_client()
        self.clock = FakeClock()
        self.prefs = MemoryPreferenceStore()
        self.controller = SessionController(
            self.client,
            self.prefs,
            config=ClientConfig(error_display_seconds=3.0),
            clock=self.clock,
        )

    async def test_load_difficulties_translates_names(self) -> None:
        self.assertEqual(self.controller.screen, Screen.LOADING)
        difficulties = await self.controller.load_difficulties()
        self.assertEqual([d.name for d in difficulties], ["Fácil", "Experto"])
        self.assertEqual(self.controller.screen, Screen.DIFFICULTY_SELECT)

    async def test_load_difficulties_failure_shows_error(self) -> None:
        self.client.fetch_difficulties.side_effect = UnexpectedValidatorError()
        difficulties = await self.controller.load_difficulties()
        self.assertEqual(difficulties, [])
        self.assertEqual(self.controller.current_error(), LOAD_DIFFICULTIES_FAILED)
        self.assertEqual(self.controller.screen, Screen.DIFFICULTY_SELECT)

    async def test_winning_game_moves_to_result_screen(self) -> None:
        self.client.check_word.return_value = verdicts("casa", "CCCC")
        engine = await self.controller.start_game("1")

        self.assertEqual(self.controller.screen, Screen.PLAYING)
        self.assertEqual(engine.grid.shape, (6, 4))
        self.client.start_session.assert_called_once_with("1")

        type_word(engine, "casa")
        await engine.submit_attempt()

        self.client.check_word.assert_called_once_with("abc", "casa")
        self.assertEqual(self.controller.screen, Screen.RESULT)
        self.assertEqual(self.controller.outcome, GameOutcome.WON)
        self.assertEqual(self.controller.total_tries, 1)

        self.controller.restart()
        self.assertEqual(self.controller.screen, Screen.DIFFICULTY_SELECT)
        self.assertIsNone(self.controller.engine)
        self.assertIsNone(self.controller.session)

    async def test_engine_errors_are_shown_then_dismissed(self) -> None:
        self.client.check_word.side_effect = InvalidWordError(status=400)
        engine = await self.controller.start_game("1")
        type_word(engine, "zzzz")
        await engine.submit_attempt()

        self.assertEqual(self.controller.current_error(), "La palabra no existe en el diccionario.")
        self.clock.now += 2.9
        self.assertEqual(self.controller.current_error(), "La palabra no existe en el diccionario.")
        self.clock.now += 0.2
        self.assertEqual(self.controller.current_error(), "")
        self.assertEqual(self.controller.screen, Screen.PLAYING)

    async def test_start_game_failure_keeps_selection_screen(self) -> None:
        await self.controller.load_difficulties()
        self.client.start_session.side_effect = SessionNotFoundError(status=404)

        self.assertIsNone(await self.controller.start_game("9"))
        self.assertEqual(self.controller.screen, Screen.DIFFICULTY_SELECT)
        self.assertEqual(self.controller.current_error(), "Sesión no encontrada.")

    async def test_submission_resolving_after_restart_is_ignored(self) -> None:
        engine = await self.controller.start_game("1")
        validator = FakeValidator([verdicts("casa", "CCCC")])
        validator.gate = asyncio.Event()
        engine._validator = validator
        type_word(engine, "casa")

        pending = asyncio.create_task(engine.submit_attempt())
        await asyncio.sleep(0)
        self.assertEqual(validator.calls, [("abc", "casa")])

        self.controller.restart()
        validator.gate.set()
        await pending

        self.assertEqual(self.controller.screen, Screen.DIFFICULTY_SELECT)
        self.assertEqual(self.controller.outcome, GameOutcome.IN_PROGRESS)
        self.assertEqual(self.controller.total_tries, 0)

    async def test_late_result_does_not_leak_into_next_game(self) -> None:
        stale = await self.controller.start_game("1")
        validator = FakeValidator([InvalidWordError(status=400)])
        validator.gate = asyncio.Event()
        stale._validator = validator
        type_word(stale, "zzzz")
        pending = asyncio.create_task(stale.submit_attempt())
        await asyncio.sleep(0)

        self.controller.restart()
        fresh = await self.controller.start_game("2")
        validator.gate.set()
        await pending

        self.assertIs(self.controller.engine, fresh)
        self.assertEqual(self.controller.screen, Screen.PLAYING)
        self.assertEqual(self.controller.current_error(), "")

    async def test_session_with_unusable_dimensions_is_rejected(self) -> None:
        await self.controller.load_difficulties()
        self.client.start_session.return_value = GameSession(session_id="abc", word_length=0)

        self.assertIsNone(await self.controller.start_game("1"))
        self.assertEqual(self.controller.screen, Screen.DIFFICULTY_SELECT)
        self.assertIsNone(self.controller.engine)
        self.assertEqual(self.controller.current_error(), SESSION_START_FAILED)

    async def test_catalog_without_ids_shows_error(self) -> None:
        response = requests.Response()
        response.status_code = 200
        response._content = b'[{"name": "Easy"}]'
        http = mock.Mock(spec=requests.Session)
        http.request.return_value = response
        controller = SessionController(ApiClient("http://words.test/api", session=http), self.prefs, clock=self.clock)

        self.assertEqual(await controller.load_difficulties(), [])
        self.assertEqual(controller.screen, Screen.DIFFICULTY_SELECT)
        self.assertEqual(controller.current_error(), LOAD_DIFFICULTIES_FAILED)

    def test_help_flag_is_persisted(self) -> None:
        self.assertTrue(self.controller.show_help)
        self.controller.dismiss_help()
        self.assertFalse(self.controller.show_help)
        self.assertTrue(self.prefs.get(SEEN_HELP_KEY))

        again = SessionController(self.client, self.prefs)
        self.assertFalse(again.show_help)
        again.open_help()
        self.assertTrue(again.show_help)


class PreferenceStoreTests(unittest.TestCase):
    def test_json_store_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "prefs.json"
            store = JsonPreferenceStore(path)
            self.assertFalse(store.get(SEEN_HELP_KEY))
            store.set(SEEN_HELP_KEY, True)
            self.assertTrue(JsonPreferenceStore(path).get(SEEN_HELP_KEY))

    def test_corrupt_file_reads_as_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "prefs.json"
            path.write_text("{not json", encoding="utf-8")
            store = JsonPreferenceStore(path)
            with self.assertLogs("wordle_client.preferences", level="WARNING"):
                self.assertFalse(store.get(SEEN_HELP_KEY))
            store.set(SEEN_HELP_KEY, True)
            self.assertTrue(store.get(SEEN_HELP_KEY))


class ClientConfigTests(unittest.TestCase):
    def test_from_env_reads_prefixed_variables(self) -> None:
        config = ClientConfig.from_env(
            environ={
                "WORDLE_API_URL": "http://localhost:3000/api",
                "WORDLE_TIMEOUT": "2.5",
                "WORDLE_MAX_ATTEMPTS": "8",
                "WORDLE_ALPHABET": "abc",
                "WORDLE_LOG_LEVEL": "debug",
            }
        )
        self.assertEqual(config.api_url, "http://localhost:3000/api")
        self.assertEqual(config.timeout, 2.5)
        self.assertEqual(config.max_attempts, 8)
        self.assertEqual(config.alphabet, "ABC")
        self.assertEqual(config.log_level, "DEBUG")
        self.assertEqual(config.error_display_seconds, 3.0)

    def test_from_dotenv_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            env_file = Path(tmp) / ".env"
            env_file.write_text("WORDLE_ERROR_DISPLAY_SECONDS=1.5\n", encoding="utf-8")
            with mock.patch.dict("os.environ", {}, clear=True):
                config = ClientConfig.from_env(env_file)
        self.assertEqual(config.error_display_seconds, 1.5)

    def test_invalid_values_raise(self) -> None:
        with self.assertRaises(ValueError):
            ClientConfig(max_attempts=0)
        with self.assertRaises(ValueError):
            ClientConfig(timeout=0)
        with self.assertRaises(ValueError):
            ClientConfig.from_env(environ={"WORDLE_MAX_ATTEMPTS": "zero"})


if __name__ == "__main__":
    unittest.main()
