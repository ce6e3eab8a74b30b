from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".xlsx", ".xls")

TEMPLATE_COLUMNS: dict[str, tuple[str, ...]] = {
    "member": (
        "full_name",
        "email",
        "phone",
        "date_of_birth",
        "gender",
        "marital_status",
        "street",
        "area",
        "community",
        "date_joined",
        "membership_level",
    ),
    "visitor": (
        "full_name",
        "email",
        "phone",
        "date_of_birth",
        "gender",
        "street",
        "area",
        "community",
        "service_date",
        "invited_by",
    ),
}


def _read_frame(path: Path) -> pd.DataFrame:
    # Read everything as text so phone numbers keep their leading zeros.
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path, dtype=str, skip_blank_lines=True)
    if suffix in (".xlsx", ".xls"):
        return pd.read_excel(path, dtype=str)
    raise ValueError(
        f"Unsupported file type '{path.suffix}'; "
        f"expected one of {', '.join(SUPPORTED_EXTENSIONS)}"
    )


def load_rows(path: str | Path) -> list[dict[str, Any]]:
    """Read a spreadsheet export into one dict per non-empty row.

    Blank cells are dropped from the row rather than kept as empty values,
    so the normalizer sees them as missing.  The header row and rows with
    no values at all are skipped, which means the row numbers reported by
    an import count data rows: row 1 is the first non-empty line below the
    header, not line 1 of the sheet.
    """
    path = Path(path)
    df = _read_frame(path)

    rows: list[dict[str, Any]] = []
    for record in df.to_dict(orient="records"):
        row = {
            str(key).strip(): value.strip() if isinstance(value, str) else value
            for key, value in record.items()
            if not pd.isna(value)
        }
        row = {k: v for k, v in row.items() if v != ""}
        if row:
            rows.append(row)

    logger.info("Loaded %d row(s) from %s", len(rows), path.name)
    return rows


def write_template(path: str | Path, category: str = "member") -> Path:
    """Write an empty import sheet with the expected column headers."""
    path = Path(path)
    columns = TEMPLATE_COLUMNS.get(category)
    if columns is None:
        raise ValueError(f"Unknown category '{category}'")
    df = pd.DataFrame(columns=list(columns))
    if path.suffix.lower() == ".xlsx":
        df.to_excel(path, index=False)
    else:
        df.to_csv(path, index=False)
    return path
