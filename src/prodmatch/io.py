"""CSV/JSONL input and output for catalog records, mentions and resolutions."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

from prodmatch.errors import InputFormatError
from prodmatch.types import Candidate, Mention, Resolution


def read_catalog(path: str | Path) -> list[Candidate]:
    """Read catalog records from CSV or JSONL.

    A missing or blank normalized_name column is recomputed from name.
    """
    return [
        Candidate(
            name=row["name"],
            normalized_name=_opt(row.get("normalized_name")) or "",
            brand=_opt(row.get("brand")),
            model_number=_opt(row.get("model_number")),
            id=_opt(row.get("id")),
            category=_opt(row.get("category")),
        )
        for row in _read_rows(Path(path))
    ]


def read_mentions(path: str | Path) -> list[Mention]:
    """Read product mentions from CSV or JSONL."""
    return [
        Mention(
            name=row["name"],
            brand=_opt(row.get("brand")),
            category=_opt(row.get("category")),
            model_number=_opt(row.get("model_number")),
            id=_opt(row.get("id")),
        )
        for row in _read_rows(Path(path))
    ]


def _read_rows(path: Path) -> list[dict[str, Any]]:
    if path.suffix == ".jsonl":
        return _read_jsonl(path)
    return _read_csv(path)


def _read_csv(path: Path) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None or "name" not in reader.fieldnames:
            raise InputFormatError(str(path), 1, "missing 'name' column")
        for row in reader:
            name = (row.get("name") or "").strip()
            if not name:
                continue
            row["name"] = name
            rows.append(row)
    return rows


def _read_jsonl(path: Path) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    with path.open(encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                row = json.loads(line)
            except json.JSONDecodeError as e:
                raise InputFormatError(str(path), lineno, f"invalid JSON: {e.msg}") from e
            if not isinstance(row, dict):
                raise InputFormatError(str(path), lineno, "expected a JSON object")
            name = str(row.get("name") or "").strip()
            if not name:
                continue
            row["name"] = name
            rows.append(row)
    return rows


def _opt(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def write_resolutions(results: list[Resolution], path: str | Path) -> None:
    """Write resolutions to CSV or JSONL."""
    path = Path(path)

    if path.suffix == ".jsonl":
        _write_jsonl(results, path)
    else:
        _write_csv(results, path)


def _record(r: Resolution) -> dict[str, Any]:
    return {
        "mention_id": r.mention.id,
        "name": r.mention.name,
        "normalized_name": r.normalized_name,
        "decision": r.decision,
        "matched_id": r.candidate.id if r.candidate else None,
        "matched_name": r.candidate.name if r.candidate else None,
        "score": r.score,
        "reasons": r.reasons,
    }


def _write_csv(results: list[Resolution], path: Path) -> None:
    fieldnames = [
        "mention_id", "name", "normalized_name", "decision",
        "matched_id", "matched_name", "score", "reasons",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for r in results:
            row = _record(r)
            row["mention_id"] = row["mention_id"] or ""
            row["matched_id"] = row["matched_id"] or ""
            row["matched_name"] = row["matched_name"] or ""
            row["score"] = f"{r.score:.4f}"
            row["reasons"] = "|".join(r.reasons)
            writer.writerow(row)


def _write_jsonl(results: list[Resolution], path: Path) -> None:
    with path.open("w", encoding="utf-8") as f:
        for r in results:
            f.write(json.dumps(_record(r), ensure_ascii=False) + "\n")
