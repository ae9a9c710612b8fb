"""pisada CLI - static footprint analysis from a photo and manual landmarks."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import cv2
import numpy as np

from .acquire import decode_payload
from .config import AnalysisConfig, load_config
from .geometry import NavicularTriangle, PosteriorLines
from .pipeline import FootAnalysis, analyze_foot
from .region import SelectionRegion, validate_selection
from .report import create_report_pdf
from .symmetry import compare_feet, foot_alerts
from .utils import ensure_dir, save_image, save_json, timestamp_iso


def _draw_annotations(
    image_rgb: np.ndarray,
    triangle: Optional[NavicularTriangle] = None,
    lines: Optional[PosteriorLines] = None,
) -> np.ndarray:
    """Draw the navicular triangle and/or calf/heel lines over an RGB image."""
    overlay = np.ascontiguousarray(image_rgb[:, :, :3]).copy()
    thickness = max(2, int(round(max(overlay.shape[:2]) / 300)))

    if triangle is not None:
        poly = np.array([[p.x, p.y] for p in triangle], dtype=np.int32).reshape((-1, 1, 2))
        fill = overlay.copy()
        cv2.fillPoly(fill, [poly], (239, 68, 68))
        overlay = cv2.addWeighted(fill, 0.2, overlay, 0.8, 0)
        cv2.polylines(overlay, [poly], True, (239, 68, 68), thickness, cv2.LINE_AA)
        vertex = triangle.p3
        cv2.circle(overlay, (int(vertex.x), int(vertex.y)), thickness * 3, (239, 68, 68), -1)

    if lines is not None:
        for (p0, p1), color in [(lines.calf, (59, 130, 246)), (lines.heel, (239, 68, 68))]:
            cv2.line(overlay, (int(p0.x), int(p0.y)), (int(p1.x), int(p1.y)), color, thickness + 1, cv2.LINE_AA)

    return overlay


def _parse_selection(text: str) -> Tuple[float, float, float, float]:
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 4:
        raise ValueError(f"--selection debe ser x,y,ancho,alto (recibido: {text!r})")
    x, y, w, h = (float(p) for p in parts)
    return x, y, w, h


def _parse_size(text: str) -> Tuple[float, float]:
    parts = text.lower().split("x")
    if len(parts) != 2:
        raise ValueError(f"--display debe ser ANCHOxALTO (recibido: {text!r})")
    return float(parts[0]), float(parts[1])


def _annotations_from_dict(data: Dict[str, Any]) -> Tuple[Optional[NavicularTriangle], Optional[PosteriorLines]]:
    triangle_data = data.get("medial_triangle")
    lines_data = data.get("posterior_lines")
    triangle = NavicularTriangle.from_dict(triangle_data) if triangle_data else None
    lines = PosteriorLines.from_dict(lines_data) if lines_data else None
    return triangle, lines


def _resolve_payload(value: str, base_dir: Path) -> Any:
    """Data URIs pass through; paths are resolved relative to ``base_dir``."""
    if value.lstrip().startswith("data:"):
        return value
    path = Path(value)
    if not path.is_absolute():
        path = base_dir / path
    return path


def _analyze_one(
    payload: Any,
    selection: SelectionRegion,
    side: str,
    output_dir: Path,
    stem: str,
    config: AnalysisConfig,
    foot_length_cm: Optional[float] = None,
    triangle: Optional[NavicularTriangle] = None,
    lines: Optional[PosteriorLines] = None,
    medial_payload: Any = None,
    posterior_payload: Any = None,
    progress_fn: Optional[Callable[[str], None]] = None,
) -> Tuple[FootAnalysis, Dict[str, Path]]:
    ensure_dir(output_dir)

    validate_selection(selection, config.min_selection_px)
    analysis = analyze_foot(
        payload,
        selection,
        side,
        foot_length_cm=foot_length_cm,
        triangle=triangle,
        lines=lines,
        config=config,
        progress_fn=progress_fn,
    )

    prefix = f"{stem}_{side}"
    outputs: Dict[str, Path] = {
        "cropped": output_dir / f"{prefix}_cropped.png",
        "grayscale": output_dir / f"{prefix}_grayscale.png",
        "heatmap": output_dir / f"{prefix}_heatmap.png",
    }
    save_image(outputs["cropped"], analysis.cropped)
    save_image(outputs["grayscale"], analysis.grayscale)
    save_image(outputs["heatmap"], analysis.heatmap)

    if medial_payload is not None and triangle is not None:
        outputs["medial_overlay"] = output_dir / f"{prefix}_medial_overlay.png"
        save_image(outputs["medial_overlay"], _draw_annotations(decode_payload(medial_payload), triangle=triangle))
    if posterior_payload is not None and lines is not None:
        outputs["posterior_overlay"] = output_dir / f"{prefix}_posterior_overlay.png"
        save_image(outputs["posterior_overlay"], _draw_annotations(decode_payload(posterior_payload), lines=lines))

    return analysis, outputs


def _foot_result(analysis: FootAnalysis) -> Dict[str, Any]:
    return {
        "metrics": analysis.metrics,
        "alerts": foot_alerts(analysis.metrics),
        "selection": analysis.selection,
        "crop_shape": list(analysis.cropped.shape[:2]),
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pisada", description="Análisis estático de pisada desde foto de huella plantar.")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze_p = sub.add_parser("analyze", help="Procesa la foto plantar de un pie y genera PNG/JSON.")
    analyze_p.add_argument("--input", type=str, required=True, help="Foto plantar (ruta o data URI).")
    analyze_p.add_argument("--selection", type=str, required=True, help="Selección en pantalla: x,y,ancho,alto.")
    analyze_p.add_argument("--display", type=str, required=True, help="Tamaño mostrado de la imagen: ANCHOxALTO.")
    analyze_p.add_argument("--side", type=str, required=True, choices=["left", "right"])
    analyze_p.add_argument("--foot_length", type=float, default=None, help="Largo real del pie en cm (ej: 25.5).")
    analyze_p.add_argument("--annotations", type=str, default=None, help="JSON con medial_triangle y/o posterior_lines.")
    analyze_p.add_argument("--medial", type=str, default=None, help="Foto medial para overlay del triángulo.")
    analyze_p.add_argument("--posterior", type=str, default=None, help="Foto posterior para overlay de líneas.")
    analyze_p.add_argument("--output_dir", type=str, default="outputs")
    analyze_p.add_argument("--config", type=str, default=None, help="Perfil JSON con umbrales.")

    session_p = sub.add_parser("session", help="Procesa ambos pies desde un JSON de sesión y genera reporte PDF.")
    session_p.add_argument("--input", type=str, required=True, help="JSON de sesión (patient, right, left).")
    session_p.add_argument("--output_dir", type=str, default="outputs")
    session_p.add_argument("--config", type=str, default=None, help="Perfil JSON con umbrales.")
    session_p.add_argument("--no_pdf", action="store_true")

    return parser


def cmd_analyze(args: argparse.Namespace) -> int:
    try:
        def _progress(msg: str) -> None:
            print(f"[analyze] {msg}")

        config = load_config(Path(args.config) if args.config else None)
        x, y, w, h = _parse_selection(args.selection)
        dw, dh = _parse_size(args.display)
        selection = SelectionRegion(x, y, w, h, dw, dh, 0.0, 0.0)

        triangle = lines = None
        if args.annotations:
            with Path(args.annotations).open("r", encoding="utf-8") as f:
                triangle, lines = _annotations_from_dict(json.load(f))

        cwd = Path.cwd()
        payload = _resolve_payload(args.input, cwd)
        output_dir = Path(args.output_dir)
        stem = Path(args.input).stem if isinstance(payload, Path) else "foto"
        analysis, outputs = _analyze_one(
            payload,
            selection,
            args.side,
            output_dir,
            stem,
            config,
            foot_length_cm=args.foot_length,
            triangle=triangle,
            lines=lines,
            medial_payload=_resolve_payload(args.medial, cwd) if args.medial else None,
            posterior_payload=_resolve_payload(args.posterior, cwd) if args.posterior else None,
            progress_fn=_progress,
        )

        results = {
            "metadata": {"timestamp": timestamp_iso(), "input_file": args.input if isinstance(payload, Path) else "data-uri"},
            "foot": _foot_result(analysis),
        }
        outputs["json"] = output_dir / f"{stem}_{args.side}_results.json"
        save_json(outputs["json"], results)

        m = analysis.metrics
        print("Análisis completado:")
        print(f"  arco: {m.arch_type} (score {m.arch_score}) | antepié {m.antepie:.1f}% | mediopié {m.mediopie:.1f}% | retropié {m.retropie:.1f}%")
        for k, v in outputs.items():
            print(f"  {k}: {v}")
        return 0
    except Exception as e:
        print(f"Error analyze: {e}")
        return 1


def cmd_session(args: argparse.Namespace) -> int:
    try:
        config = load_config(Path(args.config) if args.config else None)
        session_path = Path(args.input)
        with session_path.open("r", encoding="utf-8") as f:
            session = json.load(f)
        base_dir = session_path.parent
        output_dir = ensure_dir(Path(args.output_dir))
        stem = session_path.stem

        feet: Dict[str, FootAnalysis] = {}
        foot_results: Dict[str, Any] = {}
        images: Dict[str, Dict[str, Path]] = {}
        # Sides are independent; processed in a fixed order for stable output.
        for side in ("right", "left"):
            data = session.get(side)
            if not data:
                continue

            def _progress(msg: str, s: str = side) -> None:
                print(f"[session {s}] {msg}")

            selection = SelectionRegion.from_dict(data["selection"])
            triangle, lines = _annotations_from_dict(data)
            medial = data.get("medial_image")
            posterior = data.get("posterior_image")
            analysis, outputs = _analyze_one(
                _resolve_payload(data["image"], base_dir),
                selection,
                side,
                output_dir,
                stem,
                config,
                foot_length_cm=data.get("foot_length_cm"),
                triangle=triangle,
                lines=lines,
                medial_payload=_resolve_payload(medial, base_dir) if medial else None,
                posterior_payload=_resolve_payload(posterior, base_dir) if posterior else None,
                progress_fn=_progress,
            )
            feet[side] = analysis
            foot_results[side] = _foot_result(analysis)
            images[side] = outputs

        if not feet:
            raise ValueError("La sesión no contiene datos de 'right' ni 'left'.")

        now = timestamp_iso()
        results: Dict[str, Any] = {
            "metadata": {
                "timestamp": now,
                "folio": "PS-" + now.replace("-", "").replace(":", "").replace("T", "-"),
                "input_file": str(session_path),
            },
            "patient": session.get("patient") or {},
            "feet": {side: r["metrics"] for side, r in foot_results.items()},
            "alerts": {side: r["alerts"] for side, r in foot_results.items()},
        }
        if "right" in feet and "left" in feet:
            results["symmetry"] = compare_feet(feet["right"].metrics, feet["left"].metrics)

        json_path = output_dir / f"{stem}_session_results.json"
        save_json(json_path, results)
        print(f"Resultados: {json_path}")

        if not args.no_pdf:
            pdf_path = output_dir / f"{stem}_report.pdf"
            # round-trip through JSON-compatible structures for the report tables
            create_report_pdf(pdf_path, json.loads(json_path.read_text(encoding="utf-8")), images)
            print(f"Reporte: {pdf_path}")

        for side, analysis in feet.items():
            m = analysis.metrics
            print(f"  {side}: arco {m.arch_type} | antepié {m.antepie:.1f}% | mediopié {m.mediopie:.1f}% | retropié {m.retropie:.1f}%")
        return 0
    except Exception as e:
        print(f"Error session: {e}")
        return 1


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "analyze":
        return cmd_analyze(args)
    if args.command == "session":
        return cmd_session(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
