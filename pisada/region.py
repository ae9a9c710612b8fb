"""Map an on-screen selection rectangle to source pixels and crop it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as np

from .config import DEFAULT_CONFIG, AnalysisConfig
from .errors import BufferAllocationError, SelectionTooSmallError
from .logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SelectionRegion:
    """Selection in display pixels plus the sizes needed to rescale it."""

    x: float
    y: float
    width: float
    height: float
    display_width: float
    display_height: float
    natural_width: float
    natural_height: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SelectionRegion":
        """Build from ``{x, y, width, height, display: {width, height}, natural: {width, height}}``."""
        display = data.get("display") or {}
        natural = data.get("natural") or {}
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
            display_width=float(display.get("width", data.get("display_width", 0))),
            display_height=float(display.get("height", data.get("display_height", 0))),
            natural_width=float(natural.get("width", data.get("natural_width", 0))),
            natural_height=float(natural.get("height", data.get("natural_height", 0))),
        )

    def with_natural_size(self, natural_width: float, natural_height: float) -> "SelectionRegion":
        return SelectionRegion(
            self.x,
            self.y,
            self.width,
            self.height,
            self.display_width,
            self.display_height,
            float(natural_width),
            float(natural_height),
        )

    def scale(self) -> Tuple[float, float]:
        """Return (scale_x, scale_y) from display to natural pixels."""
        if self.display_width <= 0 or self.display_height <= 0:
            raise BufferAllocationError(
                f"Tamaño de visualización inválido: {self.display_width}x{self.display_height}"
            )
        return self.natural_width / self.display_width, self.natural_height / self.display_height

    def source_rect(self) -> Tuple[float, float, float, float]:
        """Selection expressed in source-image pixels as (x, y, w, h)."""
        sx, sy = self.scale()
        return self.x * sx, self.y * sy, self.width * sx, self.height * sy

    def output_shape(self) -> Tuple[int, int]:
        """Return (height, width) of the cropped buffer."""
        _, _, w, h = self.source_rect()
        return int(round(h)), int(round(w))


def validate_selection(selection: SelectionRegion, min_size: float = DEFAULT_CONFIG.min_selection_px) -> None:
    """Reject selections below the minimum usable size (display pixels).

    This is a precondition for calibration accuracy that callers check before
    cropping; ``crop_selection`` itself does not enforce it.
    """
    if selection.width < min_size or selection.height < min_size:
        raise SelectionTooSmallError(
            f"Selección demasiado pequeña ({selection.width:.0f}x{selection.height:.0f} px); "
            f"mínimo {min_size:.0f}x{min_size:.0f}."
        )


def crop_selection(
    image: np.ndarray,
    selection: SelectionRegion,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> np.ndarray:
    """Copy the selected source pixels into a new buffer (nearest sample, no filtering).

    Pixels of the selection that fall outside the source image stay zero.
    """
    out_h, out_w = selection.output_shape()
    if out_w <= 0 or out_h <= 0:
        raise BufferAllocationError(f"Dimensiones de recorte no positivas: {out_w}x{out_h}")
    if out_w * out_h > config.max_pixels:
        raise BufferAllocationError(
            f"Recorte de {out_w}x{out_h} px excede el límite de {config.max_pixels} píxeles."
        )

    src_x, src_y, _, _ = selection.source_rect()
    x0 = int(round(src_x))
    y0 = int(round(src_y))

    ih, iw = image.shape[:2]
    channels = image.shape[2] if image.ndim == 3 else 1
    out_shape = (out_h, out_w, channels) if image.ndim == 3 else (out_h, out_w)
    cropped = np.zeros(out_shape, dtype=image.dtype)

    # Intersection of the requested window with the source bounds.
    sx0, sy0 = max(0, x0), max(0, y0)
    sx1, sy1 = min(iw, x0 + out_w), min(ih, y0 + out_h)
    if sx1 > sx0 and sy1 > sy0:
        cropped[sy0 - y0 : sy1 - y0, sx0 - x0 : sx1 - x0] = image[sy0:sy1, sx0:sx1]
    else:
        logger.warning("La selección queda fuera de la imagen; recorte vacío %dx%d.", out_w, out_h)

    logger.debug("Recorte (%d, %d) %dx%d desde imagen %dx%d", x0, y0, out_w, out_h, iw, ih)
    return cropped
