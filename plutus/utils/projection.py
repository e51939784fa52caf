"""Normalize heterogeneous catalog rows into plain product records.

The five catalog tables use different column names for the same concepts
(``product_name``/``name``/``title``, ``product_link``/``link``/``url``) and the
``images`` column may arrive as a real array, as Postgres array text
(``{a,b,c}``) or as raw bytes depending on the driver. Every record keeps the
table's own column names so the JSON shape matches the source table.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence

from plutus.utils.logging import get_logger

IMAGES_COLUMN = "images"

ProductRecord = Dict[str, Any]

_BYTES_TYPES = (bytes, bytearray, memoryview)


def parse_pg_array(text: str) -> List[str]:
    """Parse Postgres array text such as ``{url1, url2}`` into a list of strings."""
    inner = text.strip("{}")
    if inner == "":
        return []
    return [part.strip() for part in inner.split(",")]


def project_images(value: Any) -> List[str]:
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, str):
        return parse_pg_array(value)
    if isinstance(value, _BYTES_TYPES):
        try:
            return parse_pg_array(bytes(value).decode("utf-8"))
        except UnicodeDecodeError:
            return []
    return []


def project_value(value: Any) -> Any:
    if isinstance(value, _BYTES_TYPES):
        return bytes(value).decode("utf-8")
    return value


def project_row(columns: Sequence[str], values: Sequence[Any]) -> Optional[ProductRecord]:
    """Project one result row, or return None when the row cannot be decoded."""
    if len(columns) != len(values):
        return None
    record: ProductRecord = {}
    try:
        for column, value in zip(columns, values):
            if column == IMAGES_COLUMN:
                record[column] = project_images(value)
            else:
                record[column] = project_value(value)
    except UnicodeDecodeError:
        return None
    return record


def project_rows(
    columns: Sequence[str], rows: Iterable[Sequence[Any]]
) -> List[ProductRecord]:
    logger = get_logger()
    records = []
    for row in rows:
        record = project_row(columns, row)
        if record is None:
            logger.debug(f"Skipping undecodable row with columns {list(columns)}")
            continue
        records.append(record)
    return records
