from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests

from .engine import DEFAULT_MAX_ATTEMPTS, GameSession
from .errors import UnexpectedValidatorError, error_for_status
from .grid import LetterStatus, LetterVerdict

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://word-api-hmlg.vercel.app/api"

SPANISH_DIFFICULTY_NAMES: Dict[str, str] = {
    "Easy": "Fácil",
    "Medium": "Intermedio",
    "Hard": "Difícil",
    "Expert": "Experto",
}


@dataclass(frozen=True)
class Difficulty:
    id: str
    name: str


def translate_difficulties(
    difficulties: Sequence[Difficulty],
    translations: Mapping[str, str] = SPANISH_DIFFICULTY_NAMES,
) -> List[Difficulty]:
    """Localized display names; names without a translation are kept."""
    return [replace(d, name=translations.get(d.name, d.name)) for d in difficulties]


class ApiClient:
    """
    Blocking client for the word game HTTP API.

    - GET  /difficulties        -> difficulty catalog
    - GET  /difficulties/{id}   -> new game session
    - POST /checkWord           -> per-letter verdicts for a guess
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch_difficulties(self) -> List[Difficulty]:
        data = self._request("GET", "/difficulties")
        if not isinstance(data, list):
            raise self._malformed("difficulty catalog")
        try:
            return [Difficulty(id=str(item["id"]), name=str(item["name"])) for item in data]
        except (KeyError, TypeError) as exc:
            raise self._malformed("difficulty catalog") from exc

    def start_session(self, difficulty_id: str) -> GameSession:
        data = self._request("GET", f"/difficulties/{difficulty_id}")
        if not isinstance(data, dict):
            raise self._malformed("game session")

        # The API spells the field "wordLenght"; accept the correct name too.
        word_length = data.get("wordLenght", data.get("wordLength"))
        if word_length is None or "sessionId" not in data:
            raise self._malformed("game session")
        try:
            word_length = int(word_length)
        except (TypeError, ValueError) as exc:
            raise self._malformed("game session") from exc

        difficulty = data.get("difficulty")
        if isinstance(difficulty, dict):
            difficulty = difficulty.get("name") or difficulty.get("id")

        return GameSession(
            session_id=str(data["sessionId"]),
            word_length=word_length,
            difficulty=None if difficulty is None else str(difficulty),
            max_attempts=self.max_attempts,
        )

    def check_word(self, session_id: str, word: str) -> List[LetterVerdict]:
        payload = {"sessionId": session_id, "word": word.lower()}
        data = self._request("POST", "/checkWord", json=payload)
        if not isinstance(data, list):
            raise self._malformed("validator response")
        try:
            return [
                LetterVerdict(
                    letter=str(item["letter"]),
                    status=LetterStatus.from_wire(item["solution"]),
                )
                for item in data
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise self._malformed("validator response") from exc

    @staticmethod
    def _malformed(what: str) -> UnexpectedValidatorError:
        logger.warning("Malformed %s from the word API", what)
        return UnexpectedValidatorError()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            logger.info("%s %s failed with status %s", method, url, status)
            raise error_for_status(status) from exc
        except requests.exceptions.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise UnexpectedValidatorError() from exc

        try:
            return response.json()
        except ValueError as exc:
            raise self._malformed("response body") from exc


class RemoteWordValidator:
    """Awaitable word validator backed by a blocking ApiClient."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def check_word(self, session_id: str, word: str) -> List[LetterVerdict]:
        return await asyncio.to_thread(self._client.check_word, session_id, word)
