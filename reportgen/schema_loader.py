"""Load report descriptors from a stream of concatenated JSON objects.

The schema ("ddl") file is not a JSON array: it is a sequence of standalone
top-level objects, separated by whitespace or written back to back::

    {"Name": "user", "Fields": [...]}
    {"Name": "order", "Fields": [...]}{"Name": "item", "Fields": [...]}

Loading is all-or-nothing. Any malformed value aborts the whole load, so a
bad report late in the file never yields a silently truncated schema.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import IO, Iterator, List, Union

from pydantic import ValidationError

from reportgen.exceptions import SchemaDecodeError, SchemaFileError, SchemaSyntaxError
from reportgen.models import ReportDescriptor

logger = logging.getLogger(__name__)

# JSON insignificant whitespace (RFC 8259); str.isspace() is broader
_WHITESPACE = re.compile(r"[ \t\n\r]*")


def _reject_constant(name: str) -> None:
    raise ValueError(f"invalid JSON literal {name}")


_DECODER = json.JSONDecoder(parse_constant=_reject_constant)


def _byte_offset(text: str, pos: int) -> int:
    """Bytes read up to and including the character at ``pos``."""
    return len(text[: pos + 1].encode("utf-8"))


def _read_text(stream: IO) -> str:
    raw = stream.read()
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise SchemaDecodeError(
            f"Schema input is not valid UTF-8 at offset:{exc.start}", original_error=exc
        ) from exc


def iter_reports(stream: IO) -> Iterator[ReportDescriptor]:
    """Decode report descriptors one top-level value at a time.

    Args:
        stream: Binary or text stream positioned at the start of the schema

    Yields:
        ReportDescriptor values in stream order

    Raises:
        SchemaSyntaxError: Malformed JSON; ``offset`` is the byte offset
        SchemaDecodeError: A value is not an object, has the wrong shape or
            nests deeper than the decoder can follow
    """
    text = _read_text(stream)
    pos = _WHITESPACE.match(text, 0).end()
    index = 0
    while pos < len(text):
        try:
            value, end = _DECODER.raw_decode(text, pos)
        except json.JSONDecodeError as exc:
            offset = _byte_offset(text, exc.pos)
            raise SchemaSyntaxError(
                f"Syntax error at offset:{offset} {exc.msg}", offset=offset, index=index
            ) from exc
        except ValueError as exc:
            offset = _byte_offset(text, pos)
            raise SchemaSyntaxError(
                f"Syntax error at offset:{offset} {exc}", offset=offset, index=index
            ) from exc
        except RecursionError as exc:
            raise SchemaDecodeError(
                f"Trouble decoding json: value nested too deeply at offset:{_byte_offset(text, pos)}",
                index=index,
                original_error=exc,
            ) from exc

        if not isinstance(value, dict):
            raise SchemaDecodeError(
                f"Trouble decoding json: expected an object, got {type(value).__name__}",
                index=index,
            )
        try:
            report = ReportDescriptor.model_validate(value)
        except ValidationError as exc:
            raise SchemaDecodeError(
                f"Trouble decoding json: {exc.errors()[0]['msg']} "
                f"at {'.'.join(str(p) for p in exc.errors()[0]['loc'])}",
                index=index,
                original_error=exc,
            ) from exc

        logger.debug("Decoded report %r with %d field(s)", report.name, len(report.fields))
        yield report
        index += 1
        pos = _WHITESPACE.match(text, end).end()


def load_reports(stream: IO) -> List[ReportDescriptor]:
    """Decode every report in the stream, or raise before returning any."""
    return list(iter_reports(stream))


def load_reports_from_path(path: Union[str, Path]) -> List[ReportDescriptor]:
    """Open the schema file and load all of its reports."""
    try:
        handle = open(path, "rb")
    except OSError as exc:
        raise SchemaFileError(f"Trouble opening file:{path}", path=str(path), original_error=exc) from exc

    with handle:
        try:
            reports = load_reports(handle)
        except OSError as exc:
            raise SchemaFileError(f"Trouble reading file:{path}", path=str(path), original_error=exc) from exc

    logger.info(f"Loaded {len(reports)} report(s) from {path}")
    return reports
