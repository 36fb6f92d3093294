"""
Human Play Mode
================

Play FlappyRoo interactively in a resizable pygame window.

Controls:
    - Space/Click: Start, jump, restart
    - P: Pause / resume
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--width WIDTH] [--height HEIGHT]
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import pygame

from flappyroo.roo_core.config_loader import GameConfig, load_config
from flappyroo.roo_core.config_store import JsonConfigStore, PlayerConfig
from flappyroo.roo_core.dimensions import FixedDimensionProvider
from flappyroo.roo_core.events import GameEvent, GameEventType
from flappyroo.roo_core.game import CoreGame
from flappyroo.roo_core.state_machine import GameState

logger = logging.getLogger(__name__)

DEFAULT_SPRITE = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "flappyroo", "assets", "character.png"
)
DEFAULT_CONFIG_FILE = str(Path.home() / ".flappyroo" / "config.json")


def load_character_art(player: PlayerConfig) -> pygame.Surface:
    """
    Load the character artwork, falling back to the built-in sprite.

    Uses the player's custom sprite if enabled, otherwise the bundled one.
    """
    path = DEFAULT_SPRITE
    if player.use_custom_sprite and player.custom_sprite_path:
        path = player.custom_sprite_path

    try:
        return pygame.image.load(path).convert_alpha()
    except (pygame.error, FileNotFoundError, OSError) as e:
        logger.warning(f"Could not load character art from {path}: {e}; using built-in sprite")
        return build_default_sprite()


def build_default_sprite(size: int = 64) -> pygame.Surface:
    """Draw a simple kangaroo silhouette."""
    surface = pygame.Surface((size, size), pygame.SRCALPHA)
    body = (166, 99, 60)
    belly = (222, 184, 135)
    s = size / 64

    pygame.draw.ellipse(surface, body, (8 * s, 22 * s, 38 * s, 30 * s))
    pygame.draw.ellipse(surface, belly, (20 * s, 30 * s, 20 * s, 18 * s))
    pygame.draw.ellipse(surface, body, (36 * s, 8 * s, 20 * s, 18 * s))
    pygame.draw.ellipse(surface, body, (40 * s, 0, 6 * s, 14 * s))
    pygame.draw.line(surface, body, (10 * s, 40 * s), (0, 58 * s), max(1, int(5 * s)))
    pygame.draw.rect(surface, body, (24 * s, 48 * s, 18 * s, 6 * s))
    pygame.draw.circle(surface, (20, 20, 20), (int(50 * s), int(15 * s)), max(1, int(2 * s)))
    return surface


class FlappyRooRenderer:
    """
    Draws render data onto a pygame surface.

    Render data is y-up; pygame rows grow downward.
    """

    def __init__(self, config: GameConfig, player: PlayerConfig):
        self._config = config
        self._player = player

        self._sky = (135, 206, 235)
        self._ground = (194, 150, 90)
        self._ceiling = (90, 120, 160)
        self._cloud = (250, 250, 250)
        self._obstacle = (46, 125, 50)
        self._collectible = (255, 193, 7)
        self._text_dark = (40, 40, 50)
        self._flash = (200, 30, 30)

        pygame.font.init()
        self._font_large = pygame.font.Font(None, 56)
        self._font_medium = pygame.font.Font(None, 32)
        self._font_small = pygame.font.Font(None, 22)

        self._art = load_character_art(player)
        self._bonus_points = 0

    def show_bonus(self, points: int) -> None:
        """Set the value shown by the item-collected overlay."""
        self._bonus_points = points

    def render(self, screen: pygame.Surface, data: Dict[str, Any]) -> None:
        """Render one frame."""
        height = data["height"]
        screen.fill(self._sky)

        def rect(entity: Dict[str, Any]) -> pygame.Rect:
            return pygame.Rect(
                int(entity["x"]),
                int(height - entity["y"] - entity["height"]),
                max(1, int(entity["width"])),
                max(1, int(entity["height"])),
            )

        for cloud in data["clouds"]:
            pygame.draw.ellipse(screen, self._cloud, rect(cloud))

        ground_h = int(data["ground_height"])
        pygame.draw.rect(screen, self._ground, (0, int(height) - ground_h, int(data["width"]), ground_h))
        pygame.draw.rect(screen, self._ceiling, (0, 0, int(data["width"]), int(data["ceiling_height"])))

        for obstacle in data["obstacles"]:
            pygame.draw.rect(screen, self._obstacle, rect(obstacle), border_radius=4)

        for item in data["collectibles"]:
            if not item["collected"]:
                pygame.draw.ellipse(screen, self._collectible, rect(item))

        self._draw_character(screen, data["character"], height)
        self._draw_hud(screen, data)

        if "death_flash" in data["indicators"]:
            overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
            overlay.fill((*self._flash, 90))
            screen.blit(overlay, (0, 0))

        state = data["state"]
        if state == GameState.START.name:
            self._draw_banner(screen, "FlappyRoo", "Press Space or click to start")
        elif state == GameState.PAUSED.name:
            self._draw_banner(screen, "Paused", "Press P to resume")
        elif state == GameState.GAME_OVER.name:
            self._draw_banner(
                screen,
                "Game Over",
                f"Score {data['score']}  Best {data['high_score']}  Level {data['level']}",
            )

    def _draw_character(self, screen: pygame.Surface, char: Dict[str, Any], height: float) -> None:
        size = (max(1, int(char["width"])), max(1, int(char["height"])))
        art = pygame.transform.smoothscale(self._art, size)
        if self._player.flip_horizontal:
            art = pygame.transform.flip(art, True, False)
        # Pose angles are clockwise-positive; pygame rotates counterclockwise
        angle = char["rotation"] + self._player.rotation_angle
        if angle:
            art = pygame.transform.rotate(art, -angle)
        center = (
            int(char["x"] + char["width"] / 2),
            int(height - char["y"] - char["height"] / 2),
        )
        screen.blit(art, art.get_rect(center=center))

    def _draw_hud(self, screen: pygame.Surface, data: Dict[str, Any]) -> None:
        top = int(data["ceiling_height"]) + 8
        score = self._font_medium.render(f"Score: {data['score']}", True, self._text_dark)
        screen.blit(score, (12, top))

        level_text = f"Level: {data['level']}"
        if "level_up" in data["indicators"]:
            level_text += "  UP!"
        level = self._font_medium.render(level_text, True, self._text_dark)
        screen.blit(level, (12, top + 30))

        best = self._font_small.render(f"Best: {data['high_score']}", True, self._text_dark)
        screen.blit(best, (screen.get_width() - best.get_width() - 12, top))

        if "item_collected" in data["indicators"]:
            bonus = self._font_medium.render(
                f"+{self._bonus_points}", True, self._collectible
            )
            screen.blit(bonus, (12 + score.get_width() + 10, top))

    def _draw_banner(self, screen: pygame.Surface, title: str, subtitle: str) -> None:
        w, h = screen.get_size()
        panel = pygame.Surface((w, 140), pygame.SRCALPHA)
        panel.fill((255, 255, 255, 200))
        screen.blit(panel, (0, h // 2 - 70))

        title_surf = self._font_large.render(title, True, self._text_dark)
        screen.blit(title_surf, title_surf.get_rect(center=(w // 2, h // 2 - 20)))
        sub_surf = self._font_small.render(subtitle, True, self._text_dark)
        screen.blit(sub_surf, sub_surf.get_rect(center=(w // 2, h // 2 + 30)))


class HumanPlayer:
    """Runs the pygame window and feeds input and ticks to CoreGame."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        window_width: int = 800,
        window_height: int = 600,
        target_fps: int = 60,
        config_file: str = DEFAULT_CONFIG_FILE
    ):
        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps

        pygame.init()
        self._screen = pygame.display.set_mode((window_width, window_height), pygame.RESIZABLE)
        pygame.display.set_caption("FlappyRoo")
        self._clock = pygame.time.Clock()

        self._provider = FixedDimensionProvider(window_width, window_height, config)
        self._store = JsonConfigStore(config_file, config)
        self._game = CoreGame(
            config=config,
            store=self._store,
            dimension_provider=self._provider,
            seed=seed,
            now_ms=pygame.time.get_ticks(),
        )
        self._renderer = FlappyRooRenderer(config, self._game.player_config)

        self._game.events.subscribe(GameEventType.LEVEL_UP, self._on_level_up)
        self._game.events.subscribe(GameEventType.ITEM_COLLECTED, self._on_item_collected)
        self._game.events.subscribe(GameEventType.GAME_OVER, self._on_game_over)
        self._running = True

    def run(self) -> int:
        """Run the game loop. Returns the high score."""
        logger.info("Space/click to jump, P to pause, ESC to quit")

        try:
            while self._running:
                self._game.pump(pygame.time.get_ticks())
                self._handle_events()
                self._renderer.render(self._screen, self._game.get_render_data())
                pygame.display.flip()
                self._clock.tick(self._target_fps)
        finally:
            high_score = self._game.high_score
            self._game.destroy()
            pygame.quit()
        return high_score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key in (pygame.K_SPACE, pygame.K_UP):
                    self._game.activate()
                elif event.key == pygame.K_p:
                    self._toggle_pause()

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._game.activate()

            elif event.type == pygame.VIDEORESIZE:
                self._screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self._provider.resize(event.w, event.h)
                self._game.handle_resize()

            elif event.type == pygame.WINDOWFOCUSLOST:
                self._game.pause()

    def _toggle_pause(self) -> None:
        if self._game.state == GameState.PAUSED:
            self._game.resume()
        else:
            self._game.pause()

    def _on_level_up(self, event: GameEvent) -> None:
        logger.info(f"Level {event.data['level']}")

    def _on_item_collected(self, event: GameEvent) -> None:
        self._renderer.show_bonus(event.data["points"])

    def _on_game_over(self, event: GameEvent) -> None:
        logger.info(f"Score {event.data['score']} (best {event.data['high_score']})")


def main():
    parser = argparse.ArgumentParser(description="Play FlappyRoo interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--width", type=int, default=800, help="Window width (default: 800)")
    parser.add_argument("--height", type=int, default=600, help="Window height (default: 600)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument(
        "--config-file",
        type=str,
        default=DEFAULT_CONFIG_FILE,
        help=f"Player settings JSON file (default: {DEFAULT_CONFIG_FILE})"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    player = HumanPlayer(
        config=load_config(),
        seed=args.seed,
        window_width=args.width,
        window_height=args.height,
        target_fps=args.fps,
        config_file=args.config_file,
    )
    high_score = player.run()
    logger.info(f"High score: {high_score}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
