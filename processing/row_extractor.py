"""
Row extractor — renames uploaded row values to import field names.

Given a finished column mapping, each raw row (header → cell value) becomes
a record keyed by field name. Values are copied untouched: no trimming,
coercion or defaulting happens here. Fields with no mapped column, or whose
column is absent from a particular row, are left out of the record.

Public API:
    extract_row_data(row, mapping) → dict
    extract_rows(rows, mapping) → list[dict]
    extract_dataframe(dataframe, mapping) → pd.DataFrame
    headers_from_rows(rows) → list[str]
"""

import logging
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd

from processing.column_detector import MatchResult

logger = logging.getLogger(__name__)


def extract_row_data(
    row: Mapping[str, Any],
    mapping: Mapping[str, MatchResult],
) -> dict[str, Any]:
    """
    Extract field values from one raw row.

    Args:
        row: Header → raw cell value, as parsed from the upload.
        mapping: Field name → MatchResult from detect_columns().

    Returns:
        Field name → raw cell value for every mapped field whose column is
        present in the row (empty strings and None included).
    """
    data: dict[str, Any] = {}
    for field_name, result in mapping.items():
        if result.header is not None and result.header in row:
            data[field_name] = row[result.header]
    return data


def extract_rows(
    rows: Iterable[Mapping[str, Any]],
    mapping: Mapping[str, MatchResult],
) -> list[dict[str, Any]]:
    """Apply extract_row_data() to every row, preserving order."""
    records = [extract_row_data(row, mapping) for row in rows]
    logger.debug(f"Extracted {len(records)} rows")
    return records


def extract_dataframe(
    dataframe: pd.DataFrame,
    mapping: Mapping[str, MatchResult],
) -> pd.DataFrame:
    """
    Select and rename the mapped columns of a parsed upload.

    Columns appear in mapping order, named by field. Mapped headers missing
    from the DataFrame are skipped; for duplicated column names the first
    occurrence is used. Cell values and the index are left unchanged.

    Args:
        dataframe: Parsed upload with the original headers as columns.
        mapping: Field name → MatchResult from detect_columns().

    Returns:
        New DataFrame with one column per extracted field.
    """
    source_columns = list(dataframe.columns)
    field_names: list[str] = []
    positions: list[int] = []

    for field_name, result in mapping.items():
        if result.header is None or result.header not in source_columns:
            continue
        field_names.append(field_name)
        positions.append(source_columns.index(result.header))

    extracted = dataframe.iloc[:, positions].copy()
    extracted.columns = field_names

    logger.info(
        f"Extracted {len(field_names)} field columns from "
        f"{len(source_columns)} source columns ({len(dataframe)} rows)"
    )
    return extracted


def headers_from_rows(rows: Sequence[Mapping[str, Any]]) -> list[str]:
    """
    Header list taken from the keys of the first row.

    Returns an empty list when there are no rows.
    """
    if not rows:
        return []
    return list(rows[0].keys())
