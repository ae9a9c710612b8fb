"""Image acquisition: decode data URIs, raw bytes or files into RGB(A) pixel grids."""

from __future__ import annotations

import base64
import binascii
import io
import re
from pathlib import Path
from typing import Optional, Tuple, Union
from urllib.parse import unquote_to_bytes

import cv2
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import ImageDecodeError
from .logger import get_logger

logger = get_logger(__name__)

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^,;]+)*?)(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)

_TIFF_MIMES = {"image/tiff", "image/tif"}
_TIFF_EXTS = {".tif", ".tiff"}

ImagePayload = Union[str, bytes, bytearray, Path]


def parse_data_uri(uri: str) -> Tuple[Optional[str], bytes]:
    """Split a ``data:`` URI into (mime type, raw bytes)."""
    match = _DATA_URI_RE.match(uri.strip())
    if match is None:
        raise ImageDecodeError("El payload no es un data URI válido.")
    data = match.group("data")
    if match.group("b64"):
        try:
            raw = base64.b64decode(data, validate=False)
        except (binascii.Error, ValueError) as exc:
            raise ImageDecodeError(f"Base64 inválido en data URI: {exc}") from exc
    else:
        raw = unquote_to_bytes(data)
    return match.group("mime"), raw


def _normalize_channels(decoded: np.ndarray) -> np.ndarray:
    """Convert an OpenCV BGR/BGRA/gray decode result to RGB or RGBA uint8."""
    if decoded.dtype == np.uint16:
        # 16-bit PNG: keep the 8 most significant bits
        decoded = (decoded >> 8).astype(np.uint8)
    elif decoded.dtype != np.uint8:
        raise ImageDecodeError(f"Profundidad de color no soportada: {decoded.dtype}")
    if decoded.ndim == 2:
        return cv2.cvtColor(decoded, cv2.COLOR_GRAY2RGB)
    if decoded.shape[2] == 4:
        return cv2.cvtColor(decoded, cv2.COLOR_BGRA2RGBA)
    return cv2.cvtColor(decoded, cv2.COLOR_BGR2RGB)


def _decode_with_pil(raw: bytes) -> np.ndarray:
    try:
        with Image.open(io.BytesIO(raw)) as img:
            has_alpha = img.mode in {"RGBA", "LA", "PA"} or "transparency" in img.info
            upright = ImageOps.exif_transpose(img)
            return np.array(upright.convert("RGBA" if has_alpha else "RGB"))
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError(f"No se pudo decodificar la imagen: {exc}") from exc


def decode_image_bytes(raw: bytes, mime: Optional[str] = None) -> np.ndarray:
    """Decode an encoded raster (PNG/JPEG/WebP/TIFF...) into an RGB(A) array."""
    if not raw:
        raise ImageDecodeError("Payload de imagen vacío.")

    if mime is not None and mime.lower() in _TIFF_MIMES:
        image = _decode_with_pil(raw)
    else:
        data = np.frombuffer(raw, dtype=np.uint8)
        decoded = cv2.imdecode(data, cv2.IMREAD_UNCHANGED)
        if decoded is None:
            raise ImageDecodeError(f"No se pudo decodificar la imagen ({mime or 'tipo desconocido'}).")
        if decoded.ndim == 3 and decoded.shape[2] == 4:
            # IMREAD_UNCHANGED skips EXIF orientation; Pillow keeps alpha and applies it
            image = _decode_with_pil(raw)
        else:
            # IMREAD_COLOR applies EXIF orientation (phone JPEGs)
            image = _normalize_channels(cv2.imdecode(data, cv2.IMREAD_COLOR | cv2.IMREAD_ANYDEPTH))

    if image.ndim != 3 or image.shape[0] == 0 or image.shape[1] == 0:
        raise ImageDecodeError("La imagen decodificada no tiene dimensiones válidas.")
    logger.debug("Imagen decodificada %dx%d (%d canales)", image.shape[1], image.shape[0], image.shape[2])
    return image


def load_image_any(path: Path) -> np.ndarray:
    """Load an image from disk supporting PNG/JPG/TIF and unicode paths."""
    if not path.exists():
        raise FileNotFoundError(f"No existe el archivo de imagen: {path}")

    raw = np.fromfile(str(path), dtype=np.uint8).tobytes()
    mime = "image/tiff" if path.suffix.lower() in _TIFF_EXTS else None
    return decode_image_bytes(raw, mime)


def decode_payload(payload: ImagePayload, mime: Optional[str] = None) -> np.ndarray:
    """Decode any supported payload: data URI string, raw bytes or file path."""
    if isinstance(payload, Path):
        return load_image_any(payload)
    if isinstance(payload, (bytes, bytearray)):
        return decode_image_bytes(bytes(payload), mime)
    if isinstance(payload, str):
        if payload.lstrip().startswith("data:"):
            uri_mime, raw = parse_data_uri(payload)
            return decode_image_bytes(raw, uri_mime or mime)
        return load_image_any(Path(payload))
    raise ImageDecodeError(f"Tipo de payload no soportado: {type(payload).__name__}")
