#!/usr/bin/env python3
from __future__ import annotations

import argparse
import csv
import json
import os
import sys
from typing import Dict, List, Optional, Tuple

# Make search-backend importable
THIS_DIR = os.path.dirname(__file__)
BACKEND_DIR = os.path.abspath(os.path.join(THIS_DIR, "..", "search-backend"))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from app.crs.detector import ProjectionPreference, detect_projection  # type: ignore
from app.crs.heuristics import classify_input  # type: ignore
from extract.coordinate_parser import parse  # type: ignore
from qc.bounds import validate  # type: ignore


def _read_inputs(path: str, column: Optional[str]) -> List[Tuple[str, Optional[str]]]:
    """Inputs as (text, expected_epsg). CSV needs a text column; anything else is one input per line."""
    if path.lower().endswith(".csv"):
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            col = column or "text"
            if not reader.fieldnames or col not in reader.fieldnames:
                raise SystemExit(f"CSV has no '{col}' column")
            return [(row[col], row.get("expected_epsg") or None) for row in reader]
    with open(path, encoding="utf-8") as f:
        return [(ln.rstrip("\n"), None) for ln in f if ln.strip()]


def evaluate_line(text: str, longitude: Optional[float], preference: ProjectionPreference) -> Dict[str, object]:
    """Run the synchronous stages (no transform) and report what each decided."""
    row: Dict[str, object] = {"input": text}
    cls = classify_input(text)
    row["classified"] = cls.reason
    parsed = parse(text)
    row["format"] = parsed.format.value if parsed.format else None
    if not parsed.success:
        row["error"] = parsed.error
        return row
    row["easting"], row["northing"] = parsed.easting, parsed.northing

    det = detect_projection(parsed.easting, parsed.northing, longitude, preference)
    if det.projection is None:
        row["error"] = det.warnings[0] if det.warnings else None
        return row
    row["epsg"] = det.projection.epsg
    row["confidence"] = det.confidence

    val = validate(parsed.easting, parsed.northing, det.projection)
    if not val.valid:
        row["error"] = val.errors[0]
    warnings = ([parsed.warning] if parsed.warning else []) + det.warnings + val.warnings
    row["warnings"] = ";".join(dict.fromkeys(warnings))
    return row


def evaluate(inputs: List[Tuple[str, Optional[str]]], longitude: Optional[float], preference: ProjectionPreference) -> Tuple[List[dict], dict]:
    results: List[dict] = []
    agg = {"inputs": 0, "parsed": 0, "detected": 0, "valid": 0, "expected": 0, "matched": 0}
    for text, expected in inputs:
        row = evaluate_line(text, longitude, preference)
        agg["inputs"] += 1
        agg["parsed"] += int("easting" in row)
        agg["detected"] += int("epsg" in row)
        agg["valid"] += int("epsg" in row and "error" not in row)
        if expected:
            row["expected_epsg"] = expected
            agg["expected"] += 1
            agg["matched"] += int(str(row.get("epsg")) == expected.strip())
        results.append(row)
    return results, agg


def main():
    ap = argparse.ArgumentParser(description="Run the coordinate pipeline over a file of inputs without the HTTP layer.")
    ap.add_argument("input", help="Text file (one input per line) or CSV with a 'text' column")
    ap.add_argument("--column", help="CSV column holding the input text (default 'text')")
    ap.add_argument("--lon", type=float, help="Map center longitude used to rank local zones")
    ap.add_argument("--preference", choices=[p.value for p in ProjectionPreference], default="auto")
    ap.add_argument("--format", choices=["pretty", "json", "csv"], default="pretty")
    ap.add_argument("--output", help="Optional path to write JSON/CSV output")
    args = ap.parse_args()

    if not os.path.exists(args.input):
        print(f"No such file: {args.input}")
        sys.exit(1)

    inputs = _read_inputs(args.input, args.column)
    results, agg = evaluate(inputs, args.lon, ProjectionPreference(args.preference))

    if args.format == "pretty":
        for r in results:
            outcome = r.get("error") or f"EPSG:{r['epsg']} ({r['confidence']:.2f})"
            print(f"- {r['input']!r}: format={r['format']} -> {outcome} [{r['classified']}]")
        print("\n--- aggregate ---")
        print(json.dumps(agg, indent=2))

    if args.output:
        if args.format == "json":
            with open(args.output, "w") as f:
                json.dump({"aggregate": agg, "results": results}, f, indent=2)
            print(f"Wrote JSON to {args.output}")
        elif args.format == "csv":
            fields = ["input", "classified", "format", "easting", "northing", "epsg", "confidence", "warnings", "error", "expected_epsg"]
            with open(args.output, "w", newline="") as f:
                w = csv.DictWriter(f, fieldnames=fields, extrasaction="ignore")
                w.writeheader()
                w.writerows(results)
            print(f"Wrote CSV to {args.output}")


if __name__ == "__main__":
    main()
