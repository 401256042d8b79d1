"""Grid raycaster driven by .cub level files and XPM wall textures."""

__version__ = "0.1.0"

__all__ = ["colors", "xpm", "cubfile", "raycast", "game"]