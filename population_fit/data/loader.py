"""Load observation columns from delimited text files."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from population_fit.exceptions import InvalidInputError
from population_fit.utils.logging import get_logger

log = get_logger(__name__, component="data_loader")


def load_values(path: Path, column: str | int | None = None) -> np.ndarray:
    """Read one column of numbers from a CSV or whitespace-delimited file.

    ``column`` may be a header name or a zero-based position; the first column is
    used by default. A non-numeric first row is treated as a header.
    """

    path = Path(path)
    if not path.exists():
        raise InvalidInputError(f"Input file not found: {path}")

    header = 0 if isinstance(column, str) else None
    try:
        df = pd.read_csv(path, sep=r"[,\s]+", engine="python", header=header, comment="#")
    except pd.errors.EmptyDataError:
        return np.zeros(0)
    if df.empty:
        return np.zeros(0)

    if isinstance(column, str):
        if column not in df.columns:
            raise InvalidInputError(f"Column '{column}' not found in {path}: {list(df.columns)}")
        series = df[column]
    else:
        position = column or 0
        if position >= df.shape[1]:
            raise InvalidInputError(f"Column {position} out of range for {path} ({df.shape[1]} columns)")
        series = df.iloc[:, position]

    values = pd.to_numeric(series, errors="coerce")
    if header is None and pd.isna(values.iloc[0]):
        values = values.iloc[1:]
    if values.isna().any():
        bad = int(values.isna().sum())
        raise InvalidInputError(f"{bad} non-numeric values in {path}")

    log.info("Loaded observations", extra={"path": str(path), "count": len(values)})
    return values.to_numpy(dtype=float)


__all__ = ["load_values"]
