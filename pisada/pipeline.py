"""Per-foot analysis chain: decode -> crop -> luminosity -> heatmap + metrics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np

from .acquire import ImagePayload, decode_payload
from .config import DEFAULT_CONFIG, AnalysisConfig
from .geometry import NavicularTriangle, PosteriorLines, check_side
from .heatmap import render_heatmap
from .logger import get_logger
from .metrics import FootMetrics, compute_metrics
from .preprocess import to_luminosity
from .region import SelectionRegion, crop_selection
from .utils import encode_png_data_uri

logger = get_logger(__name__)


@dataclass(frozen=True)
class FootAnalysis:
    """Rasters and metrics produced for one foot side."""

    side: str
    selection: SelectionRegion
    cropped: np.ndarray
    grayscale: np.ndarray
    heatmap: np.ndarray
    metrics: FootMetrics

    def data_uris(self) -> Dict[str, str]:
        """PNG data URIs of the three rasters, for the reporting collaborator."""
        return {
            "cropped": encode_png_data_uri(self.cropped),
            "grayscale": encode_png_data_uri(self.grayscale),
            "heatmap": encode_png_data_uri(self.heatmap),
        }


def analyze_image(
    image: np.ndarray,
    selection: SelectionRegion,
    side: str,
    foot_length_cm: Optional[float] = None,
    triangle: Optional[NavicularTriangle] = None,
    lines: Optional[PosteriorLines] = None,
    config: AnalysisConfig = DEFAULT_CONFIG,
    progress_fn: Optional[Callable[[str], None]] = None,
) -> FootAnalysis:
    """Run the synchronous stages on an already decoded RGB(A) image."""
    check_side(side)

    def _progress(msg: str) -> None:
        if progress_fn is not None:
            progress_fn(msg)

    _progress("2/4 Recorte de la selección")
    cropped = crop_selection(image, selection, config)

    _progress("3/4 Escala de grises y mapa de presión")
    grayscale = to_luminosity(cropped)
    heatmap = render_heatmap(grayscale, config)

    _progress("4/4 Métricas")
    metrics = compute_metrics(
        grayscale,
        side,
        selection=selection,
        foot_length_cm=foot_length_cm,
        triangle=triangle,
        lines=lines,
        config=config,
    )
    return FootAnalysis(side=side, selection=selection, cropped=cropped, grayscale=grayscale, heatmap=heatmap, metrics=metrics)


def analyze_foot(
    payload: ImagePayload,
    selection: SelectionRegion,
    side: str,
    foot_length_cm: Optional[float] = None,
    triangle: Optional[NavicularTriangle] = None,
    lines: Optional[PosteriorLines] = None,
    config: AnalysisConfig = DEFAULT_CONFIG,
    progress_fn: Optional[Callable[[str], None]] = None,
) -> FootAnalysis:
    """Decode ``payload`` and analyze one foot side.

    When the selection carries no natural size, the decoded image size is
    used. Decode and allocation errors propagate to the caller.
    """
    if progress_fn is not None:
        progress_fn("1/4 Decodificando imagen")
    image = decode_payload(payload)
    if selection.natural_width <= 0 or selection.natural_height <= 0:
        selection = selection.with_natural_size(image.shape[1], image.shape[0])
    logger.debug("Analizando pie %s sobre imagen %dx%d", side, image.shape[1], image.shape[0])
    return analyze_image(
        image,
        selection,
        side,
        foot_length_cm=foot_length_cm,
        triangle=triangle,
        lines=lines,
        config=config,
        progress_fn=progress_fn,
    )
