"""File I/O helpers for images and calibration data."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import cv2
import numpy as np


def read_image(path: str | Path) -> np.ndarray | None:
    """Return an image from ``path`` or ``None`` if loading fails."""
    return cv2.imread(str(path), cv2.IMREAD_UNCHANGED)


def write_image(path: str | Path, img: np.ndarray) -> None:
    """Save an image to disk."""
    if not cv2.imwrite(str(path), img):
        raise OSError(f"Failed to write image: {path}")


def load_json(path: str | Path) -> Any:
    """Load JSON data from ``path``."""
    with open(path, "r") as f:
        return json.load(f)


def save_json(path: str | Path, data: Any) -> None:
    """Write data as JSON to ``path``."""
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
