#!/usr/bin/env python
"""
Board Map - Installation Verification Script

Run this script to verify all dependencies are correctly installed.
"""

import sys
from pathlib import Path

# Add project root to path for package import
sys.path.insert(0, str(Path(__file__).parent.parent))


def check_package(name: str, import_name: str = None, version_attr: str = "__version__") -> tuple[bool, str]:
    """Check if a package is installed and return version."""
    import_name = import_name or name
    try:
        module = __import__(import_name)
        version = getattr(module, version_attr, "unknown")
        return True, str(version)
    except ImportError as e:
        return False, str(e)


def check_excel_engine() -> tuple[bool, str]:
    """Check that pandas can write and read a workbook through openpyxl."""
    try:
        import io
        import pandas as pd
        buffer = io.BytesIO()
        pd.DataFrame([["ID"], ["DB-F1-001"]]).to_excel(buffer, header=False, index=False)
        buffer.seek(0)
        rows = pd.read_excel(buffer, header=None, dtype=str).values.tolist()
        return True, f"round trip ok ({len(rows)} rows)"
    except Exception as e:
        return False, str(e)


def check_constants() -> tuple[bool, str]:
    """Check if constants module loads correctly."""
    try:
        from boardmap.constants import (
            FLOOR_LABELS,
            NEAREST_MARKER_TOLERANCE,
            DEFAULT_POSITION_X,
            InspectionStatus,
            PlacementState,
        )
        return True, f"loaded ({FLOOR_LABELS=}, {NEAREST_MARKER_TOLERANCE=})"
    except ImportError as e:
        return False, str(e)


def check_settings() -> tuple[bool, str]:
    """Check if settings.yaml loads correctly."""
    try:
        from boardmap.settings import DEFAULT_SETTINGS_PATH, load_settings
        if not DEFAULT_SETTINGS_PATH.exists():
            return False, "settings.yaml not found"
        settings = load_settings()
        return True, f"floors: {', '.join(settings.floors)}; store: {settings.store_path}"
    except Exception as e:
        return False, str(e)


def main():
    print("=" * 60)
    print("Board Map - Installation Verification")
    print("=" * 60)
    print()

    results = []

    # Core packages
    print("Core Dependencies:")
    print("-" * 40)

    packages = [
        ("pymupdf", "pymupdf", "__version__"),
        ("shapely", "shapely", "__version__"),
        ("numpy", "numpy", "__version__"),
        ("pillow", "PIL", "__version__"),
        ("pandas", "pandas", "__version__"),
        ("openpyxl", "openpyxl", "__version__"),
        ("pyyaml", "yaml", "__version__"),
    ]

    for name, import_name, version_attr in packages:
        ok, info = check_package(name, import_name, version_attr)
        status = "PASS" if ok else "FAIL"
        print(f"  {name:25} [{status}] {info}")
        results.append((name, ok))

    print()
    print("Spreadsheet Import:")
    print("-" * 40)

    ok, info = check_excel_engine()
    status = "PASS" if ok else "FAIL"
    print(f"  {'excel engine':25} [{status}] {info}")
    results.append(("excel engine", ok))

    print()
    print("Configuration:")
    print("-" * 40)

    # Constants
    ok, info = check_constants()
    status = "PASS" if ok else "FAIL"
    print(f"  {'constants.py':25} [{status}] {info}")
    results.append(("constants", ok))

    # Settings
    ok, info = check_settings()
    status = "PASS" if ok else "FAIL"
    print(f"  {'settings.yaml':25} [{status}] {info}")
    results.append(("settings", ok))

    print()
    print("=" * 60)

    # Summary
    passed = sum(1 for _, ok in results if ok)
    total = len(results)

    if passed == total:
        print(f"ALL CHECKS PASSED ({passed}/{total})")
        print("Environment is ready for floor plan placement.")
        return 0
    else:
        failed = [name for name, ok in results if not ok]
        print(f"SOME CHECKS FAILED ({passed}/{total})")
        print(f"Failed: {', '.join(failed)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
