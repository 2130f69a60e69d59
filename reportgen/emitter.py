"""Row emission: write generated rows for each report to the output stream.

Wire format per report (rows are newline-delimited, not comma-separated, so
the file as a whole is not one valid JSON document)::

    {
    "Widgets":[
    {"flag":true,"id":1804289383,"label":"a7Fq0ZkP2mXbR"}
    {"flag":false,"id":846930886,"label":"Q0p9LrTz81aaQc"}
    ]
    }
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, TextIO, Tuple

from reportgen.config import Settings
from reportgen.exceptions import OutputError, RowSerializationError
from reportgen.generators import CellValue, GeneratorSpec, RandomSource, generate, resolve_generators
from reportgen.logging_config import log_exception
from reportgen.models import ReportDescriptor

logger = logging.getLogger(__name__)

_CELL_TYPES = (str, int, float, bool)


@dataclass
class GenerationSummary:
    reports: int = 0
    rows_written: int = 0
    rows_skipped: int = 0


def report_key(name: str) -> str:
    """Top-level key for a report: the name with a literal ``s`` appended."""
    return f"{name}s"


def generate_row(specs: Iterable[Tuple[str, GeneratorSpec]], rng: RandomSource) -> Dict[str, CellValue]:
    return {column: generate(spec, rng) for column, spec in specs}


def serialize_row(row: Dict[str, CellValue]) -> str:
    """Render one row as compact JSON with sorted keys.

    Raises:
        RowSerializationError: If a cell is not str/int/float/bool or is a non-finite float
    """
    for column, value in row.items():
        if not isinstance(value, _CELL_TYPES):
            raise RowSerializationError(
                f"unsupported value type {type(value).__name__}", column=column
            )
        if isinstance(value, float) and not math.isfinite(value):
            raise RowSerializationError(f"unsupported value {value!r}", column=column)
    return json.dumps(
        row, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False
    )


def write_report(
    report: ReportDescriptor,
    order: int,
    out: TextIO,
    rng: RandomSource,
    settings: Optional[Settings] = None,
    summary: Optional[GenerationSummary] = None,
) -> int:
    """Write ``order`` rows for ``report``.

    A row that fails to serialize is logged and skipped. Returns the number
    of rows written.
    """
    logger.info(f"Report Name:{report.name}")
    summary = summary if summary is not None else GenerationSummary()
    specs = resolve_generators(report, settings)

    written = 0
    try:
        out.write("{\n")
        out.write(f"{json.dumps(report_key(report.name), ensure_ascii=False)}:[\n")
        for _ in range(order):
            row = generate_row(specs, rng)
            try:
                line = serialize_row(row)
            except RowSerializationError as exc:
                exc.details["report"] = report.name
                log_exception(logger, "Skipping row", exc)
                summary.rows_skipped += 1
                continue
            out.write(line)
            out.write("\n")
            written += 1
        out.write("]\n}\n")
    except OSError as exc:
        raise OutputError(f"Trouble writing report {report.name}", original_error=exc) from exc

    summary.reports += 1
    summary.rows_written += written
    logger.debug(f"Wrote {written} row(s) for {report.name}")
    return written


def write_reports(
    reports: List[ReportDescriptor],
    order: int,
    out: TextIO,
    rng: RandomSource,
    settings: Optional[Settings] = None,
) -> GenerationSummary:
    """Write every report in order into one stream, back to back."""
    summary = GenerationSummary()
    for report in reports:
        write_report(report, order, out, rng, settings, summary)
    return summary
