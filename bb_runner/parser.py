"""Parse benchmark result tables into result records."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Dict, List, Mapping

from bb_common.errors import ParseError
from bb_common.models import BenchmarkContext, BenchmarkKey, PlatformInfo, ResultRecord

logger = logging.getLogger(__name__)


def parse_results(path: Path) -> Dict[str, List[float]]:
    """
    Read a result table into a backend -> timings mapping.

    The header row names one backend per column; every following row holds
    one timing per backend. The mapping preserves column order.
    """
    logger.info("Parsing bench file: %s", path)
    try:
        with path.open(newline="", encoding="utf-8") as handle:
            rows = [
                (line_no, row)
                for line_no, row in enumerate(csv.reader(handle), start=1)
                if any(cell.strip() for cell in row)
            ]
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(
            f"Could not read result file {path}", context={"path": path}, cause=exc
        ) from exc

    if not rows:
        raise ParseError("Result file is empty", context={"path": path})

    header_line, header_row = rows[0]
    headers = [header.strip() for header in header_row]
    duplicates = sorted({name for name in headers if headers.count(name) > 1})
    if duplicates:
        raise ParseError(
            "Duplicate backend columns",
            context={"path": path, "line": header_line, "backends": duplicates},
        )

    columns: List[List[float]] = [[] for _ in headers]
    for line_no, row in rows[1:]:
        if len(row) != len(headers):
            raise ParseError(
                "Row width does not match the header",
                context={"path": path, "line": line_no, "expected": len(headers), "found": len(row)},
            )
        for column, cell in enumerate(row):
            try:
                columns[column].append(float(cell))
            except ValueError as exc:
                raise ParseError(
                    f"Non-numeric value {cell!r}",
                    context={"path": path, "line": line_no, "column": headers[column]},
                    cause=exc,
                ) from exc

    return dict(zip(headers, columns))


def build_records(
    timings: Mapping[str, List[float]],
    key: BenchmarkKey,
    name: str,
    platform: PlatformInfo,
) -> List[ResultRecord]:
    """One record per backend column, all sharing the job key and platform."""
    return [
        ResultRecord(
            key=key,
            context=BenchmarkContext(name=name, backend=backend),
            platform=platform,
            timings=list(values),
        )
        for backend, values in timings.items()
    ]
