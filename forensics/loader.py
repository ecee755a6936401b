"""
loader.py
Reads a transactions CSV into the list-of-dicts the engine takes.

The checks are the upload step's, done before the engine ever runs:
  - all five required columns present (header names are trimmed / lower-cased)
  - every row as wide as the header
  - at least one data row, at most MAX_TRANSACTIONS
  - every amount numeric, every timestamp a real date
Error messages number rows from the header (row 1), blank lines skipped.
"""

import csv
import io

import pandas as pd

from forensics.errors        import TransactionValidationError
from forensics.graph_builder import REQUIRED_COLUMNS, ID_COLUMNS
from forensics.engine        import MAX_TRANSACTIONS


def read_transactions_csv(source) -> list[dict]:
    """
    source : path or file-like object

    Returns transaction dicts with string ids, float amounts and ISO-8601
    UTC timestamps (e.g. "2026-02-01T10:00:00.000Z").
    """

    # ── 1. Load CSV ──────────────────────────────────────────────────────────
    text = _read_text(source)
    _check_row_widths(text)

    try:
        df = pd.read_csv(io.StringIO(text), dtype=str, skip_blank_lines=True, keep_default_na=False)
    except pd.errors.EmptyDataError as exc:
        raise TransactionValidationError("CSV must have at least one data row") from exc
    except pd.errors.ParserError as exc:
        raise TransactionValidationError(f"Malformed CSV: {exc}") from exc

    df.columns = [str(c).strip().lower() for c in df.columns]

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise TransactionValidationError(f"Missing required columns: {', '.join(missing)}")

    if df.empty:
        raise TransactionValidationError("CSV must have at least one data row")

    if len(df) > MAX_TRANSACTIONS:
        raise TransactionValidationError(f"Maximum {MAX_TRANSACTIONS:,} transactions allowed per upload")

    # ── 2. Clean & type-cast ─────────────────────────────────────────────────
    for col in REQUIRED_COLUMNS:
        df[col] = df[col].str.strip()

    amounts    = pd.to_numeric(df["amount"], errors="coerce")
    timestamps = pd.to_datetime(df["timestamp"], utc=True, format="mixed", errors="coerce")

    _reject_first_bad_row(df, amounts.isna(), "amount", "is not a valid number")
    _reject_first_bad_row(df, timestamps.isna(), "timestamp", "is not a valid date")

    # ── 3. Emit records ───────────────────────────────────────────────────────
    iso = timestamps.dt.strftime("%Y-%m-%dT%H:%M:%S.%f").str[:-3] + "Z"

    records = [
        {
            "transaction_id": row.transaction_id,
            "sender_id"     : row.sender_id,
            "receiver_id"   : row.receiver_id,
            "amount"        : float(amount),
            "timestamp"     : ts,
        }
        for row, amount, ts in zip(df[ID_COLUMNS].itertuples(index=False), amounts, iso)
    ]

    print(f"[loader] Rows loaded: {len(records)}")
    return records


def _read_text(source) -> str:
    if hasattr(source, "read"):
        data = source.read()
        return data.decode("utf-8") if isinstance(data, bytes) else data
    with open(source, newline="", encoding="utf-8") as f:
        return f.read()


def _check_row_widths(text: str) -> None:
    """
    Every data row must have exactly as many fields as the header.
    read_csv pads a short row with empty strings, so the raw field
    count is taken before pandas sees the text.
    """
    rows  = (fields for fields in csv.reader(io.StringIO(text)) if fields)
    width = None

    for row_number, fields in enumerate(rows, start=1):
        if width is None:
            width = len(fields)
        elif len(fields) != width:
            raise TransactionValidationError(
                f"Row {row_number} has {len(fields)} columns, expected {width}"
            )


def _reject_first_bad_row(df: pd.DataFrame, bad: pd.Series, column: str, problem: str) -> None:
    if not bad.any():
        return
    pos = int(bad.to_numpy().argmax())
    raise TransactionValidationError(
        f'Row {pos + 2}: {column} "{df[column].iloc[pos]}" {problem}'
    )
