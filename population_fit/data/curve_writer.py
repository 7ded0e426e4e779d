"""CurveLogger that writes sampled fit curves to CSV."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from population_fit.interfaces.curve_logger import CurveLogger
from population_fit.utils.logging import get_logger

log = get_logger(__name__, component="curve_writer")

SINGLE_POPULATION_FILE = "single_population_curve.csv"
MIXED_POPULATION_FILE = "mixed_population_curve.csv"


def curve_frame(curve: np.ndarray) -> pd.DataFrame:
    return pd.DataFrame({"x": curve[0], "y": curve[1]})


class CsvCurveLogger(CurveLogger):
    """Write each curve to ``<output_dir>/<kind>_population_curve.csv``."""

    def __init__(self, output_dir: Path, number_of_curve_points: int = 300) -> None:
        self.output_dir = Path(output_dir)
        self._points = int(number_of_curve_points)
        self.written: list[Path] = []

    @property
    def number_of_curve_points(self) -> int:
        return self._points

    def _write(self, curve: np.ndarray, name: str) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / name
        curve_frame(curve).to_csv(path, index=False)
        self.written.append(path)
        log.info("Saved fit curve", extra={"path": str(path), "points": curve.shape[1]})

    def save_single_population_curve(self, curve: np.ndarray) -> None:
        self._write(curve, SINGLE_POPULATION_FILE)

    def save_mixed_population_curve(self, curve: np.ndarray) -> None:
        self._write(curve, MIXED_POPULATION_FILE)


__all__ = ["CsvCurveLogger", "MIXED_POPULATION_FILE", "SINGLE_POPULATION_FILE", "curve_frame"]
