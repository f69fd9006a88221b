"""
Dataset parser: turns the raw text of one category dataset into Records.

Malformed rows are reported as warnings and skipped. Only input that cannot be
read as tabular text at all raises ParseFailure.
"""
import csv
import io
import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from maps_directory.errors import ParseFailure
from maps_directory.models import Record, RowWarning

# Source header name -> Record attribute
FIELD_MAP: Dict[str, str] = {
    "Name": "name",
    "Phone": "phone",
    "Hours": "hours",
    "Rating": "rating",
    "Address": "address",
    "URL": "location_link",
}

# Bytes that were not valid UTF-8 survive decoding as lone surrogates
_UNDECODABLE = re.compile("[\udc80-\udcff]")

# csv reports a quoted field still open when the input runs out with this message
_EOF_IN_QUOTES = "unexpected end of data"


@dataclass(frozen=True)
class ParseResult:
    """Materialized output of one parse."""
    records: Tuple[Record, ...] = ()
    warnings: Tuple[RowWarning, ...] = field(default_factory=tuple)


def _decode(data: Union[str, bytes]) -> str:
    if isinstance(data, bytes):
        text = data.decode("utf-8", errors="surrogateescape")
    else:
        text = data
    if text.startswith("\ufeff"):
        text = text[1:]
    return text


def _printable(cells: List[str]) -> str:
    raw = ",".join(cells)
    try:
        return raw.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
    except UnicodeEncodeError:
        # Lone surrogates that did not come from undecodable bytes
        return raw.encode("utf-8", "backslashreplace").decode("utf-8")


def _is_blank(cells: List[str]) -> bool:
    return all(not cell.strip() for cell in cells)


def _map_header(header: List[str]) -> Dict[str, int]:
    """Map Record attributes to column positions; first occurrence wins."""
    positions: Dict[str, int] = {}
    for index, name in enumerate(header):
        attr = FIELD_MAP.get(name.strip())
        if attr and attr not in positions:
            positions[attr] = index
    return positions


def _safe_get(row: pd.Series, col: str) -> Optional[str]:
    if col not in row.index:
        return None
    val = row[col]
    if pd.isna(val):
        return None
    return val


def _coerce_rating(val) -> Optional[float]:
    if val is None or pd.isna(val):
        return None
    try:
        value = float(val)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _tokenize(text: str) -> Tuple[List[str], List[List[str]], List[RowWarning]]:
    """Split text into a header, well-formed rows and row warnings."""
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    header: Optional[List[str]] = None
    rows: List[List[str]] = []
    warnings: List[RowWarning] = []

    while True:
        try:
            cells = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            # An open quote at end of input, or a broken header, leaves nothing usable
            if header is None or _EOF_IN_QUOTES in str(e):
                raise ParseFailure(f"Could not tokenize dataset near line {reader.line_num}: {e}") from e
            # The reader drops the rest of the offending line and resumes on the next one
            warnings.append(RowWarning(line=reader.line_num, reason=str(e)))
            continue

        if _is_blank(cells):
            continue
        if header is None:
            header = cells
            continue
        line = reader.line_num
        if len(cells) != len(header):
            warnings.append(RowWarning(
                line=line,
                reason=f"expected {len(header)} fields, found {len(cells)}",
                raw=_printable(cells),
            ))
            continue
        if any(_UNDECODABLE.search(cell) for cell in cells):
            warnings.append(RowWarning(line=line, reason="invalid UTF-8", raw=_printable(cells)))
            continue
        rows.append(cells)

    if header is None:
        raise ParseFailure("Dataset is empty: no header row found")
    return header, rows, warnings


def parse_dataset(data: Union[str, bytes]) -> ParseResult:
    """
    Parse one raw dataset into Records.

    Args:
        data (str | bytes): CSV text, or UTF-8 bytes as fetched. The first non-blank line is the header.

    Returns:
        ParseResult: Records in source row order plus warnings for skipped rows.

    Raises:
        ParseFailure: If the input is empty, cannot be tokenized, or its header names none of the known fields.
    """
    header, rows, warnings = _tokenize(_decode(data))

    positions = _map_header(header)
    if not positions:
        raise ParseFailure(
            f"Header does not name any known field (expected some of {', '.join(FIELD_MAP)})"
        )

    frame = pd.DataFrame(
        {attr: [cells[pos] for cells in rows] for attr, pos in positions.items()},
        dtype=object,
    )
    if "rating" in frame.columns:
        frame["rating"] = pd.to_numeric(frame["rating"].str.strip(), errors="coerce")

    records = []
    for _, row in frame.iterrows():
        records.append(Record(
            name=_safe_get(row, "name"),
            phone=_safe_get(row, "phone"),
            hours=_safe_get(row, "hours"),
            rating=_coerce_rating(_safe_get(row, "rating")),
            address=_safe_get(row, "address"),
            location_link=_safe_get(row, "location_link"),
        ))

    return ParseResult(records=tuple(records), warnings=tuple(warnings))
