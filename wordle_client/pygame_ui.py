from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Set, Tuple

import pygame

from .api import ApiClient
from .config import ClientConfig, configure_logging
from .controls import InputDispatcher, KeyEventHub, KeyPress
from .engine import GameOutcome
from .grid import LetterStatus
from .keyboard import DELETE_KEY, ENTER_KEY, KEYBOARD_ROWS, letter_status_vector
from .lifecycle import Screen, SessionController
from .preferences import JsonPreferenceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UIConfig:
    fps: int = 60
    tile_size: int = 64
    tile_gap: int = 8
    margin: int = 24


BACKGROUND = (18, 18, 19)
TEXT = (245, 245, 245)
MUTED = (155, 155, 160)
BORDER = (58, 58, 61)
ERROR = (220, 90, 90)
TILE_EMPTY = (28, 28, 31)
TILE_GREEN = (83, 141, 78)
TILE_YELLOW = (181, 159, 59)
TILE_GREY = (58, 58, 60)
INPUT_BORDER = (86, 86, 90)
KEY_UNKNOWN = (70, 70, 74)
KEY_TEXT_DARK = (32, 32, 33)

STATUS_COLORS: Dict[int, Tuple[int, int, int]] = {
    int(LetterStatus.EMPTY): TILE_EMPTY,
    int(LetterStatus.ABSENT): TILE_GREY,
    int(LetterStatus.ELSEWHERE): TILE_YELLOW,
    int(LetterStatus.CORRECT): TILE_GREEN,
}

HELP_LINES = [
    "Adiviná la palabra oculta antes de quedarte sin intentos.",
    "Verde: la letra está en el lugar correcto.",
    "Amarillo: la letra está en la palabra, en otro lugar.",
    "Gris: la letra no está en la palabra.",
    "Presioná cualquier tecla para cerrar.",
]

BACK_LABEL = "< Volver"
FOOTER_HINT = "Enter=enviar  Retroceso=borrar  Tab=volver  ?=ayuda  Esc=salir"


def key_press_from_event(event: pygame.event.Event) -> Optional[KeyPress]:
    if event.key == pygame.K_BACKSPACE:
        return KeyPress("Backspace")
    if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
        return KeyPress("Enter")
    if event.key == pygame.K_ESCAPE:
        return KeyPress("Escape")
    if event.key == pygame.K_TAB:
        return KeyPress("Tab")
    if event.unicode:
        return KeyPress(event.unicode)
    return None


class WordlePygameApp:
    def __init__(self, config: ClientConfig, ui: Optional[UIConfig] = None) -> None:
        self.config = config
        self.ui = ui or UIConfig()
        self.client = ApiClient(config.api_url, timeout=config.timeout, max_attempts=config.max_attempts)
        self.controller = SessionController(
            self.client,
            JsonPreferenceStore(config.preferences_path),
            config=config,
        )
        self.hub = KeyEventHub(default=self._on_app_key)
        self.dispatcher: Optional[InputDispatcher] = None

        self._running = True
        self._tasks: Set[asyncio.Task] = set()
        self._starting: Optional[asyncio.Task] = None
        self._key_rects: List[Tuple[pygame.Rect, str]] = []
        self._difficulty_rects: List[Tuple[pygame.Rect, str]] = []
        self._back_rect: Optional[pygame.Rect] = None

        pygame.init()
        pygame.display.set_caption("Wordle")
        self.width = 720
        self.height = 860
        self.screen = pygame.display.set_mode((self.width, self.height))

        self.font_title = pygame.font.SysFont("arial", 36, bold=True)
        self.font_tile = pygame.font.SysFont("arial", 34, bold=True)
        self.font_text = pygame.font.SysFont("arial", 24)
        self.font_small = pygame.font.SysFont("arial", 18)
        self.font_key = pygame.font.SysFont("arial", 20, bold=True)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _start_game(self, difficulty_id: str) -> None:
        if self._starting is not None and not self._starting.done():
            logger.debug("Session start already pending, ignoring difficulty %s", difficulty_id)
            return
        self._starting = self._spawn(self._start_game_async(difficulty_id))

    async def _start_game_async(self, difficulty_id: str) -> None:
        engine = await self.controller.start_game(difficulty_id)
        if engine is None:
            return
        self._attach_dispatcher()

    def _attach_dispatcher(self) -> None:
        self._detach_dispatcher()
        engine = self.controller.engine
        if engine is None:
            return
        self.dispatcher = InputDispatcher(
            insert_letter=engine.insert_letter,
            delete_letter=engine.delete_letter,
            submit=lambda: self._spawn(engine.submit_attempt()),
            disabled=lambda: engine.input_disabled or self.controller.show_help,
            alphabet=self.config.alphabet,
        )
        self.dispatcher.activate(self.hub)

    def _detach_dispatcher(self) -> None:
        if self.dispatcher is not None:
            self.dispatcher.deactivate()
            self.dispatcher = None

    def _restart(self) -> None:
        self._detach_dispatcher()
        self.controller.restart()

    def _on_app_key(self, press: KeyPress) -> bool:
        key = press.key.upper()
        if key == "ESCAPE":
            self._running = False
            return True

        if self.controller.show_help:
            self.controller.dismiss_help()
            return True

        screen = self.controller.screen
        if screen == Screen.DIFFICULTY_SELECT and key.isdigit():
            idx = int(key) - 1
            if 0 <= idx < len(self.controller.difficulties):
                self._start_game(self.controller.difficulties[idx].id)
            return True
        if screen == Screen.RESULT and key in ("R", "ENTER"):
            self._restart()
            return True
        if screen in (Screen.PLAYING, Screen.RESULT) and key == "TAB":
            self._restart()
            return True
        if key == "?":
            self.controller.open_help()
            return True
        return False

    def _on_click(self, pos: Tuple[int, int]) -> None:
        if self.controller.show_help:
            self.controller.dismiss_help()
            return

        screen = self.controller.screen
        if self._back_rect is not None and self._back_rect.collidepoint(pos):
            self._restart()
            return
        if screen == Screen.DIFFICULTY_SELECT:
            for rect, difficulty_id in self._difficulty_rects:
                if rect.collidepoint(pos):
                    self._start_game(difficulty_id)
                    return
        elif screen == Screen.PLAYING and self.dispatcher is not None:
            for rect, label in self._key_rects:
                if rect.collidepoint(pos):
                    self.dispatcher.press_virtual(label)
                    return
        elif screen == Screen.RESULT:
            self._restart()

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False
            elif event.type == pygame.KEYDOWN:
                press = key_press_from_event(event)
                if press is not None:
                    self.hub.publish(press)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._on_click(event.pos)

        if self.controller.screen != Screen.PLAYING and self.dispatcher is not None:
            self._detach_dispatcher()

    def _draw_board(self) -> None:
        engine = self.controller.engine
        if engine is None:
            return
        ui = self.ui
        grid = engine.grid
        codes = grid.status_codes()
        letters = grid.letters()

        tile = ui.tile_size
        if grid.word_length * (tile + ui.tile_gap) > self.width - ui.margin * 2:
            tile = (self.width - ui.margin * 2) // grid.word_length - ui.tile_gap

        board_w = grid.word_length * tile + (grid.word_length - 1) * ui.tile_gap
        board_x = (self.width - board_w) // 2
        board_y = 90

        for row in range(grid.max_attempts):
            for col in range(grid.word_length):
                x = board_x + col * (tile + ui.tile_gap)
                y = board_y + row * (tile + ui.tile_gap)
                rect = pygame.Rect(x, y, tile, tile)

                color = STATUS_COLORS[int(codes[row, col])]
                letter = letters[row][col]
                if grid[row].submitted:
                    border = color
                elif letter:
                    border = INPUT_BORDER
                else:
                    border = BORDER

                pygame.draw.rect(self.screen, color, rect, border_radius=6)
                pygame.draw.rect(self.screen, border, rect, width=2, border_radius=6)
                if letter:
                    text = self.font_tile.render(letter, True, TEXT)
                    self.screen.blit(text, text.get_rect(center=rect.center))

    def _draw_keyboard(self) -> None:
        engine = self.controller.engine
        if engine is None:
            return
        key_h = 56
        gap = 6
        start_y = self.height - 200
        alphabet = self.config.alphabet
        codes = letter_status_vector(engine.letter_statuses(), alphabet)

        self._key_rects = []
        for row_idx, row in enumerate(KEYBOARD_ROWS):
            widths = [74 if label in (ENTER_KEY, DELETE_KEY) else 48 for label in row]
            row_w = sum(widths) + (len(row) - 1) * gap
            x = (self.width - row_w) // 2
            y = start_y + row_idx * (key_h + gap)
            for label, key_w in zip(row, widths):
                rect = pygame.Rect(x, y, key_w, key_h)
                x += key_w + gap
                color = KEY_UNKNOWN
                if label in alphabet:
                    code = int(codes[alphabet.index(label)])
                    if code != int(LetterStatus.EMPTY):
                        color = STATUS_COLORS[code]
                pygame.draw.rect(self.screen, color, rect, border_radius=6)
                pygame.draw.rect(self.screen, BORDER, rect, width=1, border_radius=6)
                label_color = KEY_TEXT_DARK if color != KEY_UNKNOWN else TEXT
                text = self.font_key.render(label, True, label_color)
                self.screen.blit(text, text.get_rect(center=rect.center))
                self._key_rects.append((rect, label))

    def _draw_difficulties(self) -> None:
        self._difficulty_rects = []
        prompt = self.font_text.render("Elegí una dificultad para empezar a jugar", True, TEXT)
        self.screen.blit(prompt, prompt.get_rect(center=(self.width // 2, 140)))
        for idx, difficulty in enumerate(self.controller.difficulties):
            rect = pygame.Rect(0, 0, 320, 56)
            rect.center = (self.width // 2, 220 + idx * 72)
            pygame.draw.rect(self.screen, TILE_EMPTY, rect, border_radius=8)
            pygame.draw.rect(self.screen, BORDER, rect, width=2, border_radius=8)
            label = self.font_text.render(f"{idx + 1}. {difficulty.name}", True, TEXT)
            self.screen.blit(label, label.get_rect(center=rect.center))
            self._difficulty_rects.append((rect, difficulty.id))

    def _draw_header(self) -> None:
        self._back_rect = pygame.Rect(16, 20, 110, 32)
        pygame.draw.rect(self.screen, TILE_EMPTY, self._back_rect, border_radius=6)
        pygame.draw.rect(self.screen, BORDER, self._back_rect, width=1, border_radius=6)
        back = self.font_small.render(BACK_LABEL, True, TEXT)
        self.screen.blit(back, back.get_rect(center=self._back_rect.center))

        labels = [
            (self.font_small.render(d.name, True, TEXT if d.id == self.controller.difficulty_id else MUTED), d.id)
            for d in self.controller.difficulties
        ]
        if not labels:
            return
        pad = 12
        gap = 6
        total_w = sum(text.get_width() + pad * 2 for text, _ in labels) + gap * (len(labels) - 1)
        x = (self.width - total_w) // 2
        for text, difficulty_id in labels:
            rect = pygame.Rect(x, 58, text.get_width() + pad * 2, 26)
            x += rect.width + gap
            if difficulty_id == self.controller.difficulty_id:
                pygame.draw.rect(self.screen, TILE_GREEN, rect, border_radius=13)
            else:
                pygame.draw.rect(self.screen, BORDER, rect, width=1, border_radius=13)
            self.screen.blit(text, text.get_rect(center=rect.center))

    def _draw_result(self) -> None:
        won = self.controller.outcome == GameOutcome.WON
        if won:
            message = f"¡Ganaste en {self.controller.total_tries} intentos!"
        else:
            message = "Te quedaste sin intentos."
        text = self.font_title.render(message, True, TILE_GREEN if won else ERROR)
        self.screen.blit(text, text.get_rect(center=(self.width // 2, self.height - 250)))
        hint = self.font_small.render("Presioná R o hacé clic para jugar de nuevo.", True, MUTED)
        self.screen.blit(hint, hint.get_rect(center=(self.width // 2, self.height - 215)))

    def _draw_help(self) -> None:
        overlay = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 200))
        self.screen.blit(overlay, (0, 0))
        for idx, line in enumerate(HELP_LINES):
            text = self.font_text.render(line, True, TEXT)
            self.screen.blit(text, text.get_rect(center=(self.width // 2, 260 + idx * 40)))

    def _draw(self) -> None:
        self.screen.fill(BACKGROUND)
        self._back_rect = None
        title = self.font_title.render("WORDLE", True, TEXT)
        self.screen.blit(title, title.get_rect(center=(self.width // 2, 36)))

        screen = self.controller.screen
        if screen == Screen.LOADING:
            text = self.font_text.render("Cargando...", True, MUTED)
            self.screen.blit(text, text.get_rect(center=(self.width // 2, self.height // 2)))
        elif screen == Screen.DIFFICULTY_SELECT:
            self._draw_difficulties()
        else:
            self._draw_header()
            self._draw_board()
            self._draw_keyboard()
            if screen == Screen.RESULT:
                self._draw_result()

        error = self.controller.current_error()
        if error:
            msg = self.font_text.render(error, True, ERROR)
            self.screen.blit(msg, msg.get_rect(center=(self.width // 2, self.height - 230)))

        help_text = self.font_small.render(FOOTER_HINT, True, MUTED)
        self.screen.blit(help_text, help_text.get_rect(center=(self.width // 2, self.height - 18)))

        if self.controller.show_help:
            self._draw_help()

        pygame.display.flip()

    async def run(self) -> None:
        self._draw()
        await self.controller.load_difficulties()
        try:
            while self._running:
                self._handle_events()
                self._draw()
                await asyncio.sleep(1 / self.ui.fps)
        finally:
            self._detach_dispatcher()
            for task in list(self._tasks):
                task.cancel()
            self.client.close()
            pygame.quit()


def main() -> None:
    parser = argparse.ArgumentParser(description="Play the word guessing game with a Pygame UI.")
    parser.add_argument("--env-file", default=None, help="Path to a .env file with WORDLE_* settings.")
    parser.add_argument("--api-url", default=None, help="Base URL of the word API.")
    parser.add_argument("--max-attempts", type=int, default=None, help="Number of attempts per game.")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, ...).")
    args = parser.parse_args()

    config = ClientConfig.from_env(args.env_file)
    overrides = {}
    if args.api_url is not None:
        overrides["api_url"] = args.api_url
    if args.max_attempts is not None:
        overrides["max_attempts"] = args.max_attempts
    if args.log_level is not None:
        overrides["log_level"] = args.log_level.upper()
    if overrides:
        config = replace(config, **overrides)

    configure_logging(config.log_level)
    app = WordlePygameApp(config)
    asyncio.run(app.run())


if __name__ == "__main__":
    main()
