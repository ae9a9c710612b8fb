import json

import numpy as np

from conftest import make_footprint
from pisada.cli import _draw_annotations, main
from pisada.geometry import NavicularTriangle, Point, PosteriorLines
from pisada.utils import encode_png_data_uri, save_image


def _session(tmp_path):
    save_image(tmp_path / "derecho.png", make_footprint())
    save_image(tmp_path / "medial.png", np.full((120, 160, 3), 90, dtype=np.uint8))
    selection = {"x": 0, "y": 0, "width": 50, "height": 100, "display": {"width": 50, "height": 100}}
    session = {
        "patient": {"nombre": "Ana Pérez", "edad": 41, "peso": 63},
        "right": {
            "image": "derecho.png",
            "selection": selection,
            "foot_length_cm": 25,
            "medial_image": "medial.png",
            "medial_triangle": {"p1": {"x": 10, "y": 100}, "p2": {"x": 150, "y": 100}, "p3": {"x": 80, "y": 60}},
            "posterior_lines": {"calf": [[50, 0], [52, 60]], "heel": [[52, 70], [48, 110]]},
        },
        "left": {
            "image": encode_png_data_uri(make_footprint(mid_half_width=30)),
            "selection": selection,
            "foot_length_cm": 24.5,
        },
    }
    path = tmp_path / "sesion.json"
    path.write_text(json.dumps(session, ensure_ascii=False), encoding="utf-8")
    return path


def test_session_writes_artifacts_and_report(tmp_path):
    out = tmp_path / "out"
    assert main(["session", "--input", str(_session(tmp_path)), "--output_dir", str(out)]) == 0

    for side in ("right", "left"):
        for kind in ("cropped", "grayscale", "heatmap"):
            assert (out / f"sesion_{side}_{kind}.png").exists()
    assert (out / "sesion_right_medial_overlay.png").exists()
    assert (out / "sesion_report.pdf").read_bytes().startswith(b"%PDF")

    results = json.loads((out / "sesion_session_results.json").read_text(encoding="utf-8"))
    assert set(results["feet"]) == {"right", "left"}
    right = results["feet"]["right"]
    assert right["contact_area"]["area"] == 25 * 12.5 * 0.75
    assert right["navicular_angle"] is not None
    assert results["feet"]["left"]["navicular_angle"] is None
    assert results["feet"]["left"]["midfoot_pressure_ratio"] > right["midfoot_pressure_ratio"]
    assert {row["key"] for row in results["symmetry"]} >= {"total_load", "antepie", "rearfoot_angle"}
    assert results["patient"]["nombre"] == "Ana Pérez"


def test_analyze_single_foot(tmp_path):
    img_path = tmp_path / "pie.png"
    save_image(img_path, make_footprint())
    annotations = tmp_path / "marcas.json"
    annotations.write_text(
        json.dumps({"posterior_lines": {"calf": [[0, 0], [0, 100]], "heel": [[0, 0], [20, 100]]}}),
        encoding="utf-8",
    )
    out = tmp_path / "out"
    code = main(
        [
            "analyze",
            "--input", str(img_path),
            "--selection", "0,0,100,200",
            "--display", "200x400",
            "--side", "left",
            "--foot_length", "26",
            "--annotations", str(annotations),
            "--output_dir", str(out),
        ]
    )
    assert code == 0
    results = json.loads((out / "pie_left_results.json").read_text(encoding="utf-8"))
    foot = results["foot"]
    assert foot["crop_shape"] == [100, 50]
    assert foot["metrics"]["rearfoot_angle"] < 0
    assert foot["metrics"]["rearfoot_alignment"] == "varo"
    assert foot["selection"]["natural_width"] == 100


def test_analyze_rejects_small_selection(tmp_path, capsys):
    img_path = tmp_path / "pie.png"
    save_image(img_path, make_footprint())
    code = main(
        ["analyze", "--input", str(img_path), "--selection", "0,0,40,200", "--display", "100x200", "--side", "right",
         "--output_dir", str(tmp_path / "out")]
    )
    assert code == 1
    assert "Error analyze" in capsys.readouterr().out


def test_analyze_reports_decode_error(tmp_path, capsys):
    bad = tmp_path / "roto.png"
    bad.write_bytes(b"no es una imagen")
    code = main(
        ["analyze", "--input", str(bad), "--selection", "0,0,60,60", "--display", "60x60", "--side", "left",
         "--output_dir", str(tmp_path / "out")]
    )
    assert code == 1
    assert "decodificar" in capsys.readouterr().out


def test_draw_annotations_marks_pixels():
    base = np.zeros((100, 100, 3), dtype=np.uint8)
    tri = NavicularTriangle(Point(10, 90), Point(90, 90), Point(50, 40))
    lines = PosteriorLines(calf=(Point(50, 0), Point(50, 40)), heel=(Point(50, 50), Point(50, 99)))
    out = _draw_annotations(base, triangle=tri, lines=lines)
    assert out.shape == base.shape
    assert out.any()
    assert not base.any()
