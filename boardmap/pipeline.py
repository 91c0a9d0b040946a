"""
Pipeline Orchestration Module

Batch run over the local store: optional record import, QR reconciliation,
floor resolution, marker JSON per floor and annotated floor plans.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .constants import STATUS_COLORS, InspectionStatus
from .importer import import_into_store
from .models.records import InspectionRecord, Marker
from .placement.markers import build_markers, markers_for_floor
from .placement.reconciler import reconcile
from .render.floor_plan import FloorPlanRenderer
from .settings import Settings, load_settings
from .stores.document_store import JsonDocumentStore
from .stores.qr_store import QRRegistryStore
from .stores.record_store import InspectionRecordStore

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Configuration for pipeline execution."""
    data_dir: Optional[str]
    output_dir: str
    floor: str = "all"
    import_file: Optional[str] = None
    settings_path: Optional[str] = None
    no_render: bool = False
    verbose: bool = False


@dataclass
class FloorResult:
    """Output for a single floor."""
    floor: str
    markers: List[Marker]
    json_path: str
    image_path: Optional[str] = None


@dataclass
class PipelineResult:
    """Result from full pipeline execution."""
    store_path: str
    output_dir: str
    total_records: int
    imported_records: int
    placed_records: int
    unresolved_records: List[str]
    qr_locations: int
    status_counts: List[Dict[str, object]]
    floors: List[FloorResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    processing_time: float = 0.0


def summarize_statuses(records: List[InspectionRecord]) -> List[Dict[str, object]]:
    """
    Count records per status.

    Returns:
        List of {"name", "value", "color"} for statuses present, in
        Complete / In Progress / Pending order
    """
    counts: Dict[str, int] = {}
    for record in records:
        counts[record.status] = counts.get(record.status, 0) + 1

    return [
        {"name": status, "value": counts[status], "color": STATUS_COLORS[status]}
        for status in InspectionStatus.ALL
        if counts.get(status, 0) > 0
    ]


def write_markers_json(markers: List[Marker], floor: str, output_dir: str) -> str:
    """Write one floor's markers to markers_<floor>.json."""
    path = Path(output_dir) / f"markers_{floor}.json"
    payload = {
        "floor": floor,
        "count": len(markers),
        "markers": [m.to_dict() for m in markers],
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    return str(path)


def run_pipeline(args) -> PipelineResult:
    """
    Run the full batch pipeline.

    Args:
        args: Parsed command-line arguments

    Returns:
        PipelineResult with all outputs
    """
    start_time = time.time()

    config = PipelineConfig(
        data_dir=args.data_dir,
        output_dir=args.output,
        floor=args.floor,
        import_file=getattr(args, "import_file", None),
        settings_path=getattr(args, "settings", None),
        no_render=args.no_render,
        verbose=args.verbose,
    )

    # Setup logging
    log_level = logging.DEBUG if config.verbose else logging.INFO
    logging.basicConfig(level=log_level, format='%(message)s')

    settings: Settings = load_settings(config.settings_path)
    if config.data_dir:
        settings.data_dir = config.data_dir

    logger.info(f"Store: {settings.store_path}")

    warnings: List[str] = []
    store = JsonDocumentStore(str(settings.store_path))
    record_store = InspectionRecordStore(store, settings.records_key)
    qr_store = QRRegistryStore(store, settings.primary_mapping_key, settings.qr_registry_key)

    imported = 0
    if config.import_file:
        imported = import_into_store(config.import_file, record_store)
        logger.info(f"Imported {imported} records from {config.import_file}")

    records = record_store.list()
    snapshot = reconcile(qr_store)
    markers = build_markers(records, snapshot)

    unresolved = [m.id for m in markers if m.floor is None]
    if unresolved:
        warnings.append(f"{len(unresolved)} placed records have no floor: {', '.join(unresolved[:5])}")

    floors = settings.floors if config.floor == "all" else [config.floor]

    output_dir = Path(config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    renderer = FloorPlanRenderer()
    floor_results = []
    for floor in floors:
        visible = markers_for_floor(markers, floor)
        json_path = write_markers_json(visible, floor, config.output_dir)
        logger.info(f"Floor {floor}: {len(visible)} markers -> {json_path}")

        image_path = None
        if not config.no_render:
            plan_path = settings.floor_plan_path(floor)
            if plan_path is not None and plan_path.is_file():
                image_path = renderer.render_to_file(
                    str(plan_path),
                    visible,
                    str(output_dir / f"floor_plan_{floor}.png"),
                    dpi=settings.render_dpi,
                )
            else:
                warnings.append(f"No floor plan image for {floor}: {plan_path}")

        floor_results.append(FloorResult(floor, visible, json_path, image_path))

    status_counts = summarize_statuses(records)
    processing_time = time.time() - start_time

    # Summary
    logger.info(f"\nSummary:")
    logger.info(f"  Records: {len(records)} ({len(markers)} placed)")
    for entry in status_counts:
        logger.info(f"  {entry['name']}: {entry['value']}")
    logger.info(f"  QR locations: {len(snapshot.locations)} ({len(snapshot.index)} linked)")
    logger.info(f"  Processing time: {processing_time:.1f}s")

    if warnings:
        logger.info(f"\nWarnings ({len(warnings)}):")
        for w in warnings[:10]:
            logger.info(f"  - {w}")

    return PipelineResult(
        store_path=str(settings.store_path),
        output_dir=config.output_dir,
        total_records=len(records),
        imported_records=imported,
        placed_records=len(markers),
        unresolved_records=unresolved,
        qr_locations=len(snapshot.locations),
        status_counts=status_counts,
        floors=floor_results,
        warnings=warnings,
        processing_time=processing_time,
    )
