"""
Command Line Interface Module

Parses command-line arguments for the board map pipeline.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .settings import SettingsError, load_settings


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the pipeline."""
    parser = argparse.ArgumentParser(
        prog="boardmap",
        description="Place distribution board inspections on floor plans",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  boardmap -d ./data -o ./output
  boardmap -d ./data -o ./output --floor B1
  boardmap -d ./data -o ./output --import boards.xlsx --verbose
        """
    )

    # Required arguments
    parser.add_argument(
        "-o", "--output",
        required=True,
        help="Output directory path"
    )

    # Optional arguments
    parser.add_argument(
        "-d", "--data-dir",
        help="Directory holding the store and floor plans (default: from settings)"
    )

    parser.add_argument(
        "--floor",
        default="all",
        help="Floor to process (e.g. F1, B1, default: all)"
    )

    parser.add_argument(
        "--import",
        dest="import_file",
        help="CSV or Excel file of inspection records to merge into the store"
    )

    parser.add_argument(
        "--settings",
        help="Settings YAML file (default: config/settings.yaml)"
    )

    parser.add_argument(
        "--no-render",
        action="store_true",
        help="Skip annotated floor plan images"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    return parser


def validate_args(args: argparse.Namespace) -> Tuple[bool, str]:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments

    Returns:
        Tuple of (is_valid, error_message)
    """
    if args.data_dir and not Path(args.data_dir).is_dir():
        return False, f"Data directory not found: {args.data_dir}"

    if args.import_file:
        import_path = Path(args.import_file)
        if not import_path.exists():
            return False, f"Import file not found: {args.import_file}"
        if import_path.suffix.lower() not in (".csv", ".txt", ".xlsx", ".xlsm", ".xls"):
            return False, f"Import file must be CSV or Excel: {args.import_file}"

    if args.settings and not Path(args.settings).exists():
        return False, f"Settings file not found: {args.settings}"

    try:
        settings = load_settings(args.settings)
    except SettingsError as e:
        return False, str(e)

    if args.floor != "all" and args.floor not in settings.floors:
        return False, f"Unknown floor {args.floor}; expected one of: {', '.join(settings.floors)}"

    output_path = Path(args.output)
    try:
        output_path.mkdir(parents=True, exist_ok=True)
    except Exception as e:
        return False, f"Cannot create output directory: {e}"

    return True, ""


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse and validate command-line arguments.

    Args:
        args: Optional list of arguments (uses sys.argv if None)

    Returns:
        Parsed and validated arguments
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    is_valid, error_msg = validate_args(parsed)
    if not is_valid:
        parser.error(error_msg)

    return parsed


def main():
    """Main entry point for CLI."""
    args = parse_args()

    from .pipeline import run_pipeline

    try:
        run_pipeline(args)
    except KeyboardInterrupt:
        print("\nProcessing cancelled by user")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
