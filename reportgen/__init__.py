"""Synthetic row generator for report schemas.

Typical use::

    from reportgen import load_reports_from_path, write_reports, default_random_source

    reports = load_reports_from_path("reports.ddl.json")
    with open("generated_data.json", "w", encoding="utf-8") as out:
        write_reports(reports, 10, out, default_random_source())
"""

__version__ = "1.0.0"

from reportgen.config import RunOptions, Settings, load_settings, parse_row_count
from reportgen.emitter import GenerationSummary, report_key, write_report, write_reports
from reportgen.exceptions import ReportGenError
from reportgen.generators import FieldType, GeneratorSpec, default_random_source, generate
from reportgen.models import Field, Parameter, ReportDescriptor, sort_reports_by_name
from reportgen.schema_loader import iter_reports, load_reports, load_reports_from_path

__all__ = [
    "__version__",
    "Field",
    "FieldType",
    "GenerationSummary",
    "GeneratorSpec",
    "Parameter",
    "ReportDescriptor",
    "ReportGenError",
    "RunOptions",
    "Settings",
    "default_random_source",
    "generate",
    "iter_reports",
    "load_reports",
    "load_reports_from_path",
    "load_settings",
    "parse_row_count",
    "report_key",
    "sort_reports_by_name",
    "write_report",
    "write_reports",
]
