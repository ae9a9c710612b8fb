"""PDF reporting for pisada outputs."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .symmetry import ALERT_THRESHOLDS, alert_color

SIDE_TITLES = {"right": "Pie Derecho", "left": "Pie Izquierdo"}

ALERT_HEX = {
    "green": colors.HexColor("#c8e6c9"),
    "yellow": colors.HexColor("#fff59d"),
    "red": colors.HexColor("#ef9a9a"),
}

PATIENT_FIELDS = [
    ("nombre", "Nombre"),
    ("edad", "Edad"),
    ("sexo", "Sexo"),
    ("tipoProblema", "Perfil"),
    ("peso", "Peso (kg)"),
    ("talla", "Talla (cm)"),
    ("imc", "IMC"),
    ("medidaCalzado", "Calzado"),
]

LIMITATIONS = [
    "<b>Análisis orientativo:</b> este reporte es una herramienta de apoyo y no constituye un diagnóstico médico.",
    "<b>Responsabilidad del usuario:</b> la precisión depende de la calidad de las imágenes y de las marcas colocadas.",
    "<b>Análisis estático:</b> la evaluación no captura la biomecánica durante la marcha.",
    "<b>Intensidad como presión:</b> el brillo de la huella es un indicador relativo, no una medición de presión plantar certificada.",
]


def _fmt(value: Optional[float], unit: str = "", digits: int = 1) -> str:
    if value is None:
        return "N/A"
    return f"{value:.{digits}f}{unit}"


def _foot_rows(m: Mapping[str, Any]) -> List[Tuple[str, str, Optional[str]]]:
    """(label, value, alert key) rows for one foot."""
    area = m.get("contact_area")
    rows: List[Tuple[str, str, Optional[str]]] = [
        ("Carga Retropié", _fmt(m["retropie"], " %"), "retropie"),
        ("Carga Mediopié", _fmt(m["mediopie"], " %"), "mediopie"),
        ("Carga Antepié", _fmt(m["antepie"], " %"), "antepie"),
        ("Ángulo Navicular", _fmt(m.get("navicular_angle"), "°"), "navicular_angle"),
        ("Diagnóstico de Arco", str(m["arch_type"]).capitalize(), None),
        ("Índice de arco", _fmt(m["indice_arco"], "", 2), None),
        ("Ratio contacto mediopié", _fmt(m.get("midfoot_pressure_ratio"), "", 2), None),
        ("Ángulo del Talón", _fmt(m.get("rearfoot_angle"), "°"), "rearfoot_angle"),
        ("Alineación", str(m.get("rearfoot_alignment", "no medido")).capitalize(), None),
    ]
    if area:
        rows.append(
            (
                "Área de contacto",
                f"{area['area']:.1f} cm² ({area['length']:.1f} x {area['width']:.1f} cm)",
                None,
            )
        )
    else:
        rows.append(("Área de contacto", "N/A", None))
    warns = m.get("quality_warnings") or []
    if warns:
        rows.append(("Avisos calidad", " | ".join(warns), None))
    return rows


def _metrics_table(rows: List[Tuple[str, str, Optional[str]]], m: Mapping[str, Any], styles) -> Table:
    data = [["Métrica", "Valor"]]
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#d9edf7")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
        ("GRID", (0, 0), (-1, -1), 0.6, colors.grey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("ALIGN", (0, 0), (-1, -1), "LEFT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
    for i, (label, value, alert_key) in enumerate(rows, start=1):
        data.append([label, Paragraph(value, styles["Normal"])])
        if alert_key is not None:
            color = alert_color(m.get(alert_key), ALERT_THRESHOLDS[alert_key])
            style.append(("BACKGROUND", (1, i), (1, i), ALERT_HEX[color]))
    table = Table(data, colWidths=[6.0 * cm, 12.5 * cm])
    table.setStyle(TableStyle(style))
    return table


def _image_row(images: Mapping[str, Path], styles) -> Optional[Table]:
    captions = [
        ("heatmap", "Vista plantar (mapa de presión)"),
        ("medial_overlay", "Vista medial (arco)"),
        ("posterior_overlay", "Vista posterior (talón)"),
    ]
    present = [(key, label) for key, label in captions if images.get(key) is not None and Path(images[key]).exists()]
    if not present:
        return None
    img_w = img_h = 5.6 * cm
    table = Table(
        [
            [Image(str(images[key]), width=img_w, height=img_h, kind="proportional") for key, _ in present],
            [Paragraph(label, styles["Normal"]) for _, label in present],
        ],
        colWidths=[6.1 * cm] * len(present),
    )
    table.setStyle(TableStyle([("ALIGN", (0, 0), (-1, -1), "CENTER"), ("VALIGN", (0, 0), (-1, -1), "MIDDLE")]))
    return table


def _symmetry_table(rows: List[Mapping[str, Any]]) -> Table:
    data = [["Indicador", "Valor"]]
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#d9edf7")),
        ("GRID", (0, 0), (-1, -1), 0.6, colors.grey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ]
    for i, row in enumerate(rows, start=1):
        suffix = "" if row["key"] == "total_load" else " diff."
        data.append([row["label"], f"{row['value']:.1f}{row['unit']}{suffix}"])
        style.append(("BACKGROUND", (1, i), (1, i), ALERT_HEX[str(row["color"])]))
    table = Table(data, colWidths=[9.0 * cm, 9.5 * cm])
    table.setStyle(TableStyle(style))
    return table


def create_report_pdf(
    output_pdf_path: Path,
    results: Dict[str, Any],
    images: Optional[Dict[str, Dict[str, Path]]] = None,
) -> None:
    """Generate the PDF report: patient data, one section per foot, symmetry and limitations.

    ``results`` follows the layout written to ``<stem>_session_results.json``:
    ``{"metadata", "patient", "feet": {side: metrics}, "symmetry": [rows]}``.
    ``images`` maps each side to the PNG paths to embed.
    """
    images = images or {}
    doc = SimpleDocTemplate(str(output_pdf_path), pagesize=A4, leftMargin=1.2 * cm, rightMargin=1.2 * cm)
    styles = getSampleStyleSheet()
    story: List[Any] = []

    story.append(Paragraph("<b>Reporte Biométrico de Pisada</b>", styles["Title"]))
    story.append(Paragraph("Análisis estático de huella plantar", styles["Normal"]))
    story.append(Spacer(1, 0.25 * cm))

    meta = results.get("metadata", {})
    story.append(
        Paragraph(
            f"Fecha: {meta.get('timestamp', 'N/A')} | Folio: {meta.get('folio', 'N/A')}",
            styles["Normal"],
        )
    )
    story.append(Spacer(1, 0.2 * cm))

    patient = results.get("patient") or {}
    patient_rows = [[label, str(patient[key])] for key, label in PATIENT_FIELDS if patient.get(key) not in (None, "")]
    if patient_rows:
        story.append(Paragraph("<b>Datos del Paciente</b>", styles["Heading2"]))
        table = Table(patient_rows, colWidths=[6.0 * cm, 12.5 * cm])
        table.setStyle(TableStyle([("GRID", (0, 0), (-1, -1), 0.6, colors.grey)]))
        story.append(table)
        story.append(Spacer(1, 0.3 * cm))

    feet = results.get("feet", {})
    for side in ("right", "left"):
        m = feet.get(side)
        if m is None:
            continue
        story.append(Paragraph(f"<b>Análisis Detallado - {SIDE_TITLES[side]}</b>", styles["Heading2"]))
        image_table = _image_row(images.get(side, {}), styles)
        if image_table is not None:
            story.append(image_table)
            story.append(Spacer(1, 0.3 * cm))
        story.append(_metrics_table(_foot_rows(m), m, styles))
        story.append(Spacer(1, 0.4 * cm))

    symmetry = results.get("symmetry")
    if symmetry:
        story.append(PageBreak())
        story.append(Paragraph("<b>Análisis de Simetría y Balance</b>", styles["Heading2"]))
        story.append(_symmetry_table(symmetry))
        story.append(Spacer(1, 0.4 * cm))

    story.append(Paragraph("<b>Aviso Importante y Limitaciones del Análisis</b>", styles["Heading3"]))
    for text in LIMITATIONS:
        story.append(Paragraph(text, styles["Italic"]))

    doc.build(story)
