from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from .keyboard import DEFAULT_ALPHABET, DELETE_KEY, ENTER_KEY

logger = logging.getLogger(__name__)

KeyHandler = Callable[["KeyPress"], bool]


class InputAction(str, Enum):
    INSERT = "insert"
    DELETE = "delete"
    SUBMIT = "submit"


@dataclass(frozen=True)
class KeyPress:
    """A physical key signal, named the way browsers name `KeyboardEvent.key`."""

    key: str


class KeyEventHub:
    """
    Process-wide key listener registry.

    Handlers are offered each press newest-first; the first one returning True
    consumes it and the press goes no further (in particular, not to the
    default handler). Unconsumed presses fall through to `default`.
    """

    def __init__(self, default: Optional[KeyHandler] = None) -> None:
        self._handlers: List[KeyHandler] = []
        self._default = default

    @property
    def listener_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: KeyHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, press: KeyPress) -> bool:
        for handler in reversed(list(self._handlers)):
            if handler(press):
                return True
        if self._default is not None:
            return bool(self._default(press))
        return False


class InputDispatcher:
    """
    Turns on-screen key activations and physical key presses into the three
    game actions. Both sources go through `dispatch`, so they share one gate.
    """

    def __init__(
        self,
        *,
        insert_letter: Callable[[str], Any],
        delete_letter: Callable[[], Any],
        submit: Callable[[], Any],
        disabled: Union[bool, Callable[[], bool]] = False,
        alphabet: str = DEFAULT_ALPHABET,
    ) -> None:
        self._insert_letter = insert_letter
        self._delete_letter = delete_letter
        self._submit = submit
        self.disabled = disabled
        self.alphabet = alphabet.upper()
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def is_disabled(self) -> bool:
        if callable(self.disabled):
            return bool(self.disabled())
        return bool(self.disabled)

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def dispatch(self, action: InputAction, letter: Optional[str] = None) -> bool:
        if self.is_disabled:
            logger.debug("Input disabled, dropping %s", action.value)
            return False

        if action == InputAction.INSERT:
            if letter is None:
                raise ValueError("insert requires a letter.")
            self._insert_letter(letter.upper())
        elif action == InputAction.DELETE:
            self._delete_letter()
        else:
            self._submit()
        return True

    def translate_key(self, press: KeyPress) -> Optional[InputAction]:
        key = press.key.upper()
        if key == "BACKSPACE":
            return InputAction.DELETE
        if key == "ENTER":
            return InputAction.SUBMIT
        if len(key) == 1 and key in self.alphabet:
            return InputAction.INSERT
        return None

    def handle_key(self, press: KeyPress) -> bool:
        """Physical-key adapter. Returns True when the press was consumed."""
        if self.is_disabled:
            return False
        action = self.translate_key(press)
        if action is None:
            return False
        letter = press.key.upper() if action == InputAction.INSERT else None
        return self.dispatch(action, letter)

    def press_virtual(self, label: str) -> bool:
        """On-screen keyboard adapter."""
        key = label.upper()
        if key == ENTER_KEY:
            return self.dispatch(InputAction.SUBMIT)
        if key == DELETE_KEY:
            return self.dispatch(InputAction.DELETE)
        if len(key) == 1 and key in self.alphabet:
            return self.dispatch(InputAction.INSERT, key)
        raise ValueError(f"Unknown on-screen key: {label!r}")

    def activate(self, hub: KeyEventHub) -> None:
        if self._unsubscribe is not None:
            return
        self._unsubscribe = hub.subscribe(self.handle_key)

    def deactivate(self) -> None:
        if self._unsubscribe is None:
            return
        self._unsubscribe()
        self._unsubscribe = None

    def __enter__(self) -> "InputDispatcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.deactivate()
