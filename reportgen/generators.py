"""Field-type generators for synthetic report rows.

Each declared field type maps to a ``GeneratorSpec`` once per report. Rows
are produced by calling ``generate(spec, rng)`` for every column, drawing all
randomness from an explicitly passed ``RandomSource``.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Protocol, Tuple, Union

from reportgen.config import DEFAULT_MINIMUM_OCCURRENCE, Settings
from reportgen.models import ReportDescriptor

logger = logging.getLogger(__name__)

CellValue = Union[str, int, float, bool]

ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
STRING_BASE_LENGTH = 10
STRING_LENGTH_SPREAD = 10
MAX_INT32 = 2**31
MAX_INT64 = 2**63
DATETIME_SECONDS_RANGE = 10_000_000_000
DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
DATETIME_MINIMUM = "0001-01-01T00:00:00"


class RandomSource(Protocol):
    """Anything that can draw a uniform integer in ``[0, stop)``."""

    def randrange(self, stop: int) -> int:
        ...


def default_random_source(seed: Optional[int] = None) -> random.Random:
    """Return a fresh generator. Unseeded runs are not reproducible."""
    return random.Random(seed)


class FieldType(str, Enum):
    """Declared field types understood by the generator."""

    STRING = "string"
    INT = "int"
    LONG = "long"
    DECIMAL = "decimal"
    DATETIME = "datetime"
    BOOL = "bool"
    UNKNOWN = ""

    @classmethod
    def choices(cls) -> List[str]:
        return [kind.value for kind in cls if kind is not cls.UNKNOWN]

    @classmethod
    def parse(cls, value: str) -> "FieldType":
        """Match a declared type exactly; anything unrecognized is UNKNOWN."""
        for kind in cls:
            if kind is not cls.UNKNOWN and kind.value == value:
                return kind
        return cls.UNKNOWN


@dataclass(frozen=True)
class GeneratorSpec:
    """One column's generator: the variant plus its parameters."""

    kind: FieldType
    declared_type: str = ""
    minimum_occurrence: int = DEFAULT_MINIMUM_OCCURRENCE

    @classmethod
    def for_type(cls, declared_type: str, settings: Optional[Settings] = None) -> "GeneratorSpec":
        kind = FieldType.parse(declared_type)
        if kind is FieldType.DATETIME and settings is not None:
            return cls(kind, declared_type, settings.minimum_occurrence)
        return cls(kind, declared_type)


def _generate_string(rng: RandomSource) -> str:
    length = rng.randrange(STRING_LENGTH_SPREAD) + STRING_BASE_LENGTH + 1
    return "".join(ALPHABET[rng.randrange(len(ALPHABET))] for _ in range(length))


def _generate_datetime(rng: RandomSource, minimum_occurrence: int) -> str:
    seconds = rng.randrange(DATETIME_SECONDS_RANGE)
    if minimum_occurrence and seconds % minimum_occurrence == 0:
        return DATETIME_MINIMUM
    return datetime.fromtimestamp(seconds, tz=timezone.utc).strftime(DATETIME_FORMAT)


def generate(spec: GeneratorSpec, rng: RandomSource) -> CellValue:
    """Produce one value for ``spec``.

    Rules:
        string   -- 11 to 20 characters drawn uniformly from ``ALPHABET``
        int      -- uniform in [0, 2**31)
        long     -- uniform in [0, 2**63)
        decimal  -- uniform in [0, 2**63), integer-divided by 100
        datetime -- UTC timestamp in [0, 1e10) seconds, or ``DATETIME_MINIMUM``
                    when the drawn seconds divide evenly by minimum_occurrence
        bool     -- an even draw in [0, 2**31)
        unknown  -- empty string
    """
    kind = spec.kind
    if kind is FieldType.STRING:
        return _generate_string(rng)
    if kind is FieldType.INT:
        return rng.randrange(MAX_INT32)
    if kind is FieldType.LONG:
        return rng.randrange(MAX_INT64)
    if kind is FieldType.DECIMAL:
        return rng.randrange(MAX_INT64) // 100
    if kind is FieldType.DATETIME:
        return _generate_datetime(rng, spec.minimum_occurrence)
    if kind is FieldType.BOOL:
        return rng.randrange(MAX_INT32) % 2 == 0
    return ""


def resolve_generators(
    report: ReportDescriptor, settings: Optional[Settings] = None
) -> List[Tuple[str, GeneratorSpec]]:
    """Pick a generator for every field of ``report``.

    Unknown types get the empty-string generator and one warning each, here
    and not per row.
    """
    specs: List[Tuple[str, GeneratorSpec]] = []
    for field in report.fields:
        spec = GeneratorSpec.for_type(field.type, settings)
        if spec.kind is FieldType.UNKNOWN:
            logger.warning(
                f"Warning: no generator for type:{field.type} "
                f"(report:{report.name}, column:{field.col_name})",
                extra={"report": report.name, "column": field.col_name},
            )
        specs.append((field.col_name, spec))
    return specs
