"""
Pipeline and CLI Tests

Tests for settings loading, argument validation, floor plan rendering and
the batch pipeline over a local store.
"""

import json
import sys
import tempfile
from pathlib import Path

import pymupdf
from PIL import Image, ImageColor

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from boardmap.cli import create_parser, validate_args
from boardmap.constants import STATUS_COLORS, InspectionStatus
from boardmap.models import InspectionRecord, Marker, Position
from boardmap.pipeline import run_pipeline, summarize_statuses
from boardmap.render import FloorPlanError, FloorPlanRenderer, image_natural_size, load_floor_plan
from boardmap.settings import Settings, SettingsError, load_settings
from boardmap.stores import InspectionRecordStore, JsonDocumentStore

SETTINGS_TEMPLATE = """
store:
  data_dir: {data_dir}
  filename: store.json
floors:
  F1: plan_f1.png
  B1: plan_b1.pdf
placement:
  default_floor: F1
render:
  dpi: 72
"""


def write_settings(tmpdir):
    path = Path(tmpdir) / "settings.yaml"
    path.write_text(SETTINGS_TEMPLATE.format(data_dir=tmpdir), encoding="utf-8")
    return str(path)


def write_plans(tmpdir):
    Image.new("RGB", (200, 100), (255, 255, 255)).save(Path(tmpdir) / "plan_f1.png")

    doc = pymupdf.open()
    doc.new_page(width=200, height=100)
    doc.save(str(Path(tmpdir) / "plan_b1.pdf"))
    doc.close()


def write_store(tmpdir):
    store = JsonDocumentStore(str(Path(tmpdir) / "store.json"))
    InspectionRecordStore(store).update([
        InspectionRecord(id="DB-F1-001", status="Complete", position=Position(50, 50)),
        InspectionRecord(id="DB-F1-002", status="Pending", position=Position(10, 90)),
        InspectionRecord(id="DB-B1-003", status="In Progress", position=Position(25, 25)),
        InspectionRecord(id="DB-004", position=Position(60, 60)),
        InspectionRecord(id="DB-F1-005"),
    ])
    store.set("safetyguard_qrcodes", [
        {"id": "Q1", "qrData": json.dumps({"id": "DB-F1-002"}), "location": "Annex", "floor": "B1"},
    ])
    return store


def test_default_settings_file():
    """Test the shipped settings file."""
    settings = load_settings()
    assert settings.floors == ["F1", "B1"]
    assert settings.default_floor == "F1"
    assert settings.tolerance == 5.0
    assert settings.poll_interval == 2.0
    assert settings.records_key == "inspections"
    print("  [PASS] Shipped settings load")


def test_settings_missing_file():
    """Test fallback to defaults."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = load_settings(str(Path(tmpdir) / "nope.yaml"))
        assert settings == Settings()
    print("  [PASS] Missing settings file uses defaults")


def test_settings_bad_default_floor():
    """Test default floor validation."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "settings.yaml"
        path.write_text("placement:\n  default_floor: F9\n", encoding="utf-8")
        try:
            load_settings(str(path))
            assert False, "Expected SettingsError"
        except SettingsError:
            pass
    print("  [PASS] Unknown default floor rejected")


def test_settings_bad_yaml():
    """Test malformed settings."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "settings.yaml"
        path.write_text("floors: [unclosed\n", encoding="utf-8")
        try:
            load_settings(str(path))
            assert False, "Expected SettingsError"
        except SettingsError:
            pass
    print("  [PASS] Malformed YAML rejected")


def test_parser_defaults():
    """Test parser defaults."""
    parser = create_parser()
    args = parser.parse_args(["-o", "out"])
    assert args.output == "out"
    assert args.floor == "all"
    assert args.data_dir is None
    assert args.import_file is None
    assert not args.no_render
    assert not args.verbose
    print("  [PASS] Parser defaults")


def test_parser_requires_output():
    """Test that output is required."""
    try:
        create_parser().parse_args([])
        assert False, "Expected SystemExit"
    except SystemExit:
        pass
    print("  [PASS] Output argument required")


def test_validate_args():
    """Test argument validation."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings_path = write_settings(tmpdir)
        parser = create_parser()
        out = str(Path(tmpdir) / "out")

        ok, _ = validate_args(parser.parse_args(["-o", out, "-d", tmpdir, "--settings", settings_path]))
        assert ok
        assert Path(out).is_dir()

        ok, msg = validate_args(parser.parse_args(["-o", out, "--settings", settings_path, "--floor", "F9"]))
        assert not ok and "F9" in msg

        ok, msg = validate_args(parser.parse_args(["-o", out, "-d", str(Path(tmpdir) / "missing")]))
        assert not ok and "Data directory" in msg

        bad_import = Path(tmpdir) / "boards.json"
        bad_import.write_text("[]", encoding="utf-8")
        ok, msg = validate_args(parser.parse_args(["-o", out, "--import", str(bad_import)]))
        assert not ok and "CSV or Excel" in msg
    print("  [PASS] Argument validation")


def test_summarize_statuses():
    """Test status counts."""
    records = [
        InspectionRecord(id="a", status="Pending"),
        InspectionRecord(id="b", status="Complete"),
        InspectionRecord(id="c", status="Pending"),
    ]
    summary = summarize_statuses(records)
    assert summary == [
        {"name": "Complete", "value": 1, "color": STATUS_COLORS[InspectionStatus.COMPLETE]},
        {"name": "Pending", "value": 2, "color": STATUS_COLORS[InspectionStatus.PENDING]},
    ]
    assert summarize_statuses([]) == []
    print("  [PASS] Status summary omits empty statuses")


def test_render_marker_color():
    """Test that markers are painted in their status color."""
    image = Image.new("RGB", (200, 100), (255, 255, 255))
    record = InspectionRecord(id="DB-F1-001", status="Complete", position=Position(50, 50))
    marker = Marker(id=record.id, position=record.position, record=record, floor="F1")

    annotated = FloorPlanRenderer().render(image, [marker])
    assert annotated is not image
    assert annotated.getpixel((100, 50)) == ImageColor.getrgb(STATUS_COLORS["Complete"])
    assert image.getpixel((100, 50)) == (255, 255, 255)
    print("  [PASS] Marker painted in status color")


def test_load_pdf_plan():
    """Test rendering a PDF floor plan."""
    with tempfile.TemporaryDirectory() as tmpdir:
        write_plans(tmpdir)
        image = load_floor_plan(str(Path(tmpdir) / "plan_b1.pdf"), dpi=144)
        assert image.size == (400, 200)
        assert image_natural_size(str(Path(tmpdir) / "plan_f1.png")) == (200, 100)
        assert image_natural_size(str(Path(tmpdir) / "missing.png")) is None
        try:
            load_floor_plan(str(Path(tmpdir) / "missing.png"))
            assert False, "Expected FloorPlanError"
        except FloorPlanError:
            pass
    print("  [PASS] PDF and raster plans load")


def test_run_pipeline():
    """Test the full batch run."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings_path = write_settings(tmpdir)
        write_plans(tmpdir)
        write_store(tmpdir)
        out = Path(tmpdir) / "out"

        args = create_parser().parse_args([
            "-o", str(out), "-d", tmpdir, "--settings", settings_path,
        ])
        result = run_pipeline(args)

        assert result.total_records == 5
        assert result.placed_records == 4
        assert result.unresolved_records == ["DB-004"]
        assert result.qr_locations == 1
        assert [f.floor for f in result.floors] == ["F1", "B1"]

        f1 = json.loads((out / "markers_F1.json").read_text(encoding="utf-8"))
        assert [m["id"] for m in f1["markers"]] == ["DB-F1-001"]

        # Registry floor outranks the id segment
        b1 = json.loads((out / "markers_B1.json").read_text(encoding="utf-8"))
        assert sorted(m["id"] for m in b1["markers"]) == ["DB-B1-003", "DB-F1-002"]

        with Image.open(out / "floor_plan_F1.png") as img:
            assert img.size == (200, 100)
            assert img.getpixel((100, 50)) == ImageColor.getrgb(STATUS_COLORS["Complete"])
        with Image.open(out / "floor_plan_B1.png") as img:
            assert img.size == (200, 100)
    print("  [PASS] Pipeline writes markers and floor plans")


def test_run_pipeline_single_floor_no_render():
    """Test a single-floor run without images."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings_path = write_settings(tmpdir)
        write_store(tmpdir)
        out = Path(tmpdir) / "out"

        args = create_parser().parse_args([
            "-o", str(out), "-d", tmpdir, "--settings", settings_path,
            "--floor", "B1", "--no-render",
        ])
        result = run_pipeline(args)
        assert [f.floor for f in result.floors] == ["B1"]
        assert result.floors[0].image_path is None
        assert not (out / "floor_plan_B1.png").exists()
        assert not (out / "markers_F1.json").exists()
    print("  [PASS] Single floor without rendering")


def test_run_pipeline_missing_plan_warns():
    """Test a run whose floor plans are missing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings_path = write_settings(tmpdir)
        write_store(tmpdir)
        args = create_parser().parse_args([
            "-o", str(Path(tmpdir) / "out"), "-d", tmpdir, "--settings", settings_path,
        ])
        result = run_pipeline(args)
        assert any("No floor plan image for F1" in w for w in result.warnings)
    print("  [PASS] Missing floor plan reported as warning")


def test_run_pipeline_with_import():
    """Test importing a sheet before the run."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings_path = write_settings(tmpdir)
        csv_path = Path(tmpdir) / "boards.csv"
        csv_path.write_text(
            "ID,Status,X,Y\nDB-1st-010,Complete,20,30\nDB-B-011,Pending,,\n",
            encoding="utf-8",
        )
        args = create_parser().parse_args([
            "-o", str(Path(tmpdir) / "out"), "-d", tmpdir, "--settings", settings_path,
            "--import", str(csv_path), "--no-render",
        ])
        result = run_pipeline(args)
        assert result.imported_records == 2
        assert result.total_records == 2

        ids = {f.floor: [m.id for m in f.markers] for f in result.floors}
        assert ids == {"F1": ["DB-F1-010"], "B1": ["DB-B-011"]}
    print("  [PASS] Imported records placed by floor")


def run_all_tests():
    """Run all pipeline and CLI tests."""
    print("=" * 60)
    print("Pipeline and CLI Tests")
    print("=" * 60)
    print()

    tests = [
        ("Settings Tests:", [
            test_default_settings_file,
            test_settings_missing_file,
            test_settings_bad_default_floor,
            test_settings_bad_yaml,
        ]),
        ("CLI Tests:", [
            test_parser_defaults,
            test_parser_requires_output,
            test_validate_args,
        ]),
        ("Render Tests:", [
            test_summarize_statuses,
            test_render_marker_color,
            test_load_pdf_plan,
        ]),
        ("Pipeline Tests:", [
            test_run_pipeline,
            test_run_pipeline_single_floor_no_render,
            test_run_pipeline_missing_plan_warns,
            test_run_pipeline_with_import,
        ]),
    ]

    all_passed = True
    for title, group in tests:
        print(title)
        print("-" * 40)
        for test in group:
            try:
                test()
            except AssertionError as e:
                print(f"  [FAIL] {test.__name__}: {e}")
                all_passed = False
            except Exception as e:
                print(f"  [ERROR] {test.__name__}: {e}")
                all_passed = False
        print()

    print("=" * 60)
    if all_passed:
        print("ALL PIPELINE AND CLI TESTS PASSED")
        return 0
    else:
        print("SOME TESTS FAILED")
        return 1


if __name__ == "__main__":
    sys.exit(run_all_tests())
