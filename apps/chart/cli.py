"""
CLI tool: render a dental chart PDF from an extraction JSON file.

Usage:
    dental-chart --extraction raw.json [--edits edits.json] [--out DIR] [--today YYYY-MM-DD]
    dental-chart --extraction raw.json --normalize-only

Without --out the PDF is saved under DATA_DIR/artifacts/<record>/.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from packages.shared.storage import write_atomic
from apps.chart.pipeline import run_pipeline
from apps.chart.steps.step01_normalize import normalize_payload
from apps.chart.steps.export_render import DocumentGenerationError

logger = logging.getLogger(__name__)


def _load_json(path: Path, label: str):
    if not path.exists():
        print(f"ERROR: {label} file not found at {path}", file=sys.stderr)
        sys.exit(1)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        print(f"ERROR: {label} file {path} is not valid JSON: {exc}", file=sys.stderr)
        sys.exit(1)


def _parse_today(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"--today must be YYYY-MM-DD, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dental-chart",
        description="Render the five-page dental chart PDF from extraction-service JSON.",
    )
    parser.add_argument("--extraction", required=True, help="RawExtraction JSON file")
    parser.add_argument("--edits", help="User edits JSON file (canonical key -> value)")
    parser.add_argument("--out", help="Output directory (default: DATA_DIR/artifacts/<record>)")
    parser.add_argument("--record-id", help="Record id used for the artifact directory and log prefix")
    parser.add_argument("--today", type=_parse_today, help="Clock override, YYYY-MM-DD")
    parser.add_argument("--logo", help="Header logo image (default: $DENTAL_CHART_LOGO_PATH)")
    parser.add_argument(
        "--normalize-only", action="store_true",
        help="Print the canonical field map as JSON and exit",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    args = build_parser().parse_args(argv)

    payload = _load_json(Path(args.extraction), "Extraction")

    if args.normalize_only:
        result = normalize_payload(payload, today=args.today)
        print(json.dumps(result.model_dump(mode="json"), indent=2, sort_keys=True))
        return 0

    edits = _load_json(Path(args.edits), "Edits") if args.edits else None
    if edits is not None and not isinstance(edits, dict):
        print("ERROR: Edits file must contain a JSON object", file=sys.stderr)
        return 1

    options = {"today": args.today, "record_id": args.record_id, "save": not args.out}
    if args.logo:
        options["logo_path"] = args.logo

    try:
        result = run_pipeline(payload, edits, **options)
    except DocumentGenerationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if args.out:
        path = write_atomic(Path(args.out) / result.document.filename, result.document.content)
    else:
        path = result.saved_path

    for w in result.warnings:
        print(f"WARNING [{w.code}] {w.message}", file=sys.stderr)
    print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
