"""Utility helpers for pisada."""

from __future__ import annotations

import base64
import json
from dataclasses import asdict, is_dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

import cv2
import numpy as np

from .errors import BufferAllocationError


def ensure_dir(path: Path) -> Path:
    """Create a directory if it does not exist and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def timestamp_iso() -> str:
    """Return local timestamp in ISO format."""
    return datetime.now().isoformat(timespec="seconds")


def _to_bgr(image: np.ndarray) -> np.ndarray:
    """Pipeline rasters are RGB(A); OpenCV encoders expect BGR(A)."""
    if image.ndim == 2:
        return image
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_RGBA2BGRA)
    return cv2.cvtColor(image, cv2.COLOR_RGB2BGR)


def encode_png(image: np.ndarray) -> bytes:
    """Encode an RGB(A) raster as lossless PNG bytes."""
    if image.size == 0:
        raise BufferAllocationError("No se puede codificar una imagen vacía.")
    ok, encoded = cv2.imencode(".png", _to_bgr(image))
    if not ok:
        raise ValueError("No se pudo codificar la imagen como PNG.")
    return encoded.tobytes()


def encode_png_data_uri(image: np.ndarray) -> str:
    """Encode an RGB(A) raster as a self-describing ``data:image/png`` URI."""
    payload = base64.b64encode(encode_png(image)).decode("ascii")
    return f"data:image/png;base64,{payload}"


def save_image(path: Path, image: np.ndarray) -> None:
    """Save RGB(A) image to disk handling unicode paths on Windows."""
    ext = path.suffix if path.suffix else ".png"
    ok, encoded = cv2.imencode(ext, _to_bgr(image))
    if not ok:
        raise ValueError(f"No se pudo codificar imagen para guardar en {path}")
    encoded.tofile(str(path))


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses/numpy objects to JSON-compatible structures."""
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, (np.integer,)):
        return int(value)
    if isinstance(value, (np.floating,)):
        return float(value)
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, Path):
        return str(value)
    return value


def save_json(path: Path, data: Dict[str, Any]) -> None:
    """Write JSON with UTF-8 and pretty formatting."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(to_jsonable(data), f, ensure_ascii=False, indent=2)
