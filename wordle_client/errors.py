from __future__ import annotations

from typing import Optional


class WordleClientError(Exception):
    """Base class for every error surfaced by the client."""

    default_message = "Error al validar la palabra."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidDimensionError(WordleClientError, ValueError):
    default_message = "word_length and max_attempts must be >= 1"


class IncompleteAttemptError(WordleClientError):
    default_message = "Completá todas las letras antes de enviar."


class ValidatorError(WordleClientError):
    """
    Failure reported by the remote word validator.

    `status` is the HTTP status code, or None when no response was received.
    """

    def __init__(self, message: Optional[str] = None, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class InvalidWordError(ValidatorError):
    default_message = "La palabra no existe en el diccionario."


class SessionNotFoundError(ValidatorError):
    default_message = "Sesión no encontrada."


class UnexpectedValidatorError(ValidatorError):
    default_message = "Error inesperado."


def error_for_status(status: Optional[int]) -> ValidatorError:
    if status == 400:
        return InvalidWordError(status=status)
    if status == 404:
        return SessionNotFoundError(status=status)
    return UnexpectedValidatorError(status=status)
