"""
Solid Renderer
==============

Fast numpy-based renderer that draws every entity as a solid rectangle.
Used for rgb_array rendering and image observations without pygame.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from flappyroo.roo_core.config_loader import GameConfig, get_config


class SolidRenderer:
    """
    Renders the game as flat-colored rectangles.

    Render data is in y-up screen coordinates; rows are flipped when
    writing into the image.
    """

    def __init__(self, config: Optional[GameConfig] = None, show_hitboxes: bool = False):
        """
        Initialize renderer.

        Args:
            config: Game configuration. Uses default if None.
            show_hitboxes: Outline padded hitboxes for debugging.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._show_hitboxes = show_hitboxes

        self._sky_color = np.array([135, 206, 235], dtype=np.uint8)
        self._ground_color = np.array([194, 150, 90], dtype=np.uint8)
        self._ceiling_color = np.array([90, 120, 160], dtype=np.uint8)
        self._cloud_color = np.array([250, 250, 250], dtype=np.uint8)
        self._obstacle_color = np.array([46, 125, 50], dtype=np.uint8)
        self._collectible_color = np.array([255, 193, 7], dtype=np.uint8)
        self._character_color = np.array([166, 99, 60], dtype=np.uint8)
        self._hitbox_color = np.array([220, 40, 40], dtype=np.uint8)
        self._game_over_tint = np.array([120, 0, 0], dtype=np.uint8)

    def render(
        self,
        render_data: Dict[str, Any],
        width: int,
        height: int
    ) -> np.ndarray:
        """
        Render the game state to an RGB array.

        Args:
            render_data: Data from CoreGame.get_render_data().
            width: Output image width.
            height: Output image height.

        Returns:
            (height, width, 3) uint8 array.
        """
        img = np.empty((height, width, 3), dtype=np.uint8)
        img[:] = self._sky_color

        scale_x = width / render_data["width"]
        scale_y = height / render_data["height"]

        def fill(x: float, y: float, w: float, h: float, color: np.ndarray) -> None:
            self._fill_rect(img, x * scale_x, y * scale_y, w * scale_x, h * scale_y, color)

        screen_w = render_data["width"]
        screen_h = render_data["height"]

        for cloud in render_data["clouds"]:
            fill(cloud["x"], cloud["y"], cloud["width"], cloud["height"], self._cloud_color)

        fill(0, 0, screen_w, render_data["ground_height"], self._ground_color)
        ceiling = render_data["ceiling_height"]
        fill(0, screen_h - ceiling, screen_w, ceiling, self._ceiling_color)

        for obstacle in render_data["obstacles"]:
            fill(obstacle["x"], obstacle["y"], obstacle["width"], obstacle["height"], self._obstacle_color)

        for item in render_data["collectibles"]:
            if item["collected"]:
                continue
            fill(item["x"], item["y"], item["width"], item["height"], self._collectible_color)

        char = render_data["character"]
        fill(char["x"], char["y"], char["width"], char["height"], self._character_color)

        if self._show_hitboxes:
            padding = self._config.collision.character_padding
            self._outline_rect(
                img,
                (char["x"] + char["width"] * padding) * scale_x,
                (char["y"] + char["height"] * padding) * scale_y,
                char["width"] * (1 - 2 * padding) * scale_x,
                char["height"] * (1 - 2 * padding) * scale_y,
                self._hitbox_color,
            )

        if "death_flash" in render_data.get("indicators", ()):
            img[:] = (img // 2 + self._game_over_tint // 2).astype(np.uint8)

        return img

    def _fill_rect(
        self,
        img: np.ndarray,
        x: float,
        y: float,
        w: float,
        h: float,
        color: np.ndarray
    ) -> None:
        """Fill a y-up rectangle, clipped to the image."""
        img_h, img_w = img.shape[:2]
        x_min = max(0, int(round(x)))
        x_max = min(img_w, int(round(x + w)))
        # Flip to row indices
        row_min = max(0, img_h - int(round(y + h)))
        row_max = min(img_h, img_h - int(round(y)))

        if x_min >= x_max or row_min >= row_max:
            return
        img[row_min:row_max, x_min:x_max] = color

    def _outline_rect(
        self,
        img: np.ndarray,
        x: float,
        y: float,
        w: float,
        h: float,
        color: np.ndarray,
        thickness: int = 1
    ) -> None:
        """Draw a rectangle outline."""
        self._fill_rect(img, x, y, w, thickness, color)
        self._fill_rect(img, x, y + h - thickness, w, thickness, color)
        self._fill_rect(img, x, y, thickness, h, color)
        self._fill_rect(img, x + w - thickness, y, thickness, h, color)

    def close(self) -> None:
        """Clean up resources (no-op for solid renderer)."""
        pass
