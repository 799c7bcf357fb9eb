"""End-to-end tests of the command line entry point."""

import json

import pytest

from app import build_parser, main


@pytest.fixture
def image_path(tmp_path, gradient_image):
    path = tmp_path / "ramp.png"
    gradient_image.save(path)
    return path


@pytest.fixture
def calibration_path(tmp_path):
    path = tmp_path / "calibration.json"
    path.write_text(
        json.dumps({"base_width": 80.0, "base_height": 60.0, "drawing_width": 40.0, "drawing_height": 30.0})
    )
    return path


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["stipple", "--input", "in.png"])
    assert args.num_points == 20000
    assert args.voronoi_iterations == 0
    assert args.tsp_improvement == 0.0
    assert args.gamma == 1.0
    assert not args.cmyk and not args.draw_points


def test_stipple_then_gcode(tmp_path, image_path, calibration_path) -> None:
    svg_path = tmp_path / "out.svg"
    json_path = tmp_path / "tours.json"
    code = main(
        [
            "stipple",
            "--input", str(image_path),
            "--svg", str(svg_path),
            "--json", str(json_path),
            "--num-points", "120",
            "--voronoi-iterations", "1",
            "--tsp-improvement", "0.01",
            "--cmyk",
            "--seed", "3",
        ]
    )
    assert code == 0
    assert "<polyline" in svg_path.read_text()
    assert len(json.loads(json_path.read_text())) == 4

    out_dir = tmp_path / "gcode"
    code = main(
        [
            "gcode",
            "--input", str(json_path),
            "--output", str(out_dir),
            "--calibration", str(calibration_path),
        ]
    )
    assert code == 0
    assert sorted(p.name for p in out_dir.iterdir()) == [f"channel_{i:03}.gcode" for i in range(4)]
    assert "G21" in (out_dir / "channel_000.gcode").read_text()


def test_stipple_points_svg(tmp_path, image_path) -> None:
    svg_path = tmp_path / "points.svg"
    code = main(
        ["stipple", "-i", str(image_path), "-s", str(svg_path), "-n", "40", "--draw-points", "--seed", "1"]
    )
    assert code == 0
    assert svg_path.read_text().count("<circle") == 40


def test_gcode_single_channel_document(tmp_path, calibration_path) -> None:
    json_path = tmp_path / "tour.json"
    json_path.write_text(json.dumps([{"x": 0, "y": 0}, {"x": 10, "y": 5}, {"x": 4, "y": 9}]))
    out_dir = tmp_path / "gcode"
    assert main(["gcode", "-i", str(json_path), "-o", str(out_dir), "-c", str(calibration_path)]) == 0
    assert [p.name for p in out_dir.iterdir()] == ["channel_000.gcode"]


def test_degenerate_tour_fails(tmp_path, calibration_path) -> None:
    json_path = tmp_path / "tour.json"
    json_path.write_text(json.dumps([{"x": 1, "y": 1}, {"x": 1, "y": 1}]))
    assert main(["gcode", "-i", str(json_path), "-o", str(tmp_path / "out"), "-c", str(calibration_path)]) == 1


def test_bad_calibration_fails(tmp_path) -> None:
    json_path = tmp_path / "tour.json"
    json_path.write_text("[]")
    calibration = tmp_path / "calibration.json"
    calibration.write_text(json.dumps({"base_width": 1}))
    assert main(["gcode", "-i", str(json_path), "-o", str(tmp_path / "out"), "-c", str(calibration)]) == 1


def test_missing_image_fails(tmp_path) -> None:
    assert main(["stipple", "-i", str(tmp_path / "missing.png")]) == 1


@pytest.mark.parametrize("option", [["--gamma", "0"], ["--tsp-improvement", "-0.01"], ["--voronoi-iterations", "-1"]])
def test_out_of_range_options_fail(image_path, option) -> None:
    assert main(["stipple", "-i", str(image_path), *option]) == 1
