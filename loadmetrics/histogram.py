"""Metric samples and the histogram sink they are aggregated into."""

from __future__ import annotations

import math
import threading
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np

UNIT_MS_SMALLER_IS_BETTER = "ms_smallerIsBetter"


@dataclass(frozen=True, slots=True)
class MetricSample:
    value: float
    diagnostics: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class HistogramStats:
    count: int
    finite_count: int
    sum: float
    mean: float
    min: float
    max: float
    p50: float
    p90: float
    p95: float


def loading_bin_boundaries() -> np.ndarray:
    """0-1000 ms by 50 ms, 1000-3000 ms by 100 ms, then 20 exponential bins to 20 s."""
    linear_fine = np.linspace(0.0, 1_000.0, 21)
    linear_coarse = np.linspace(1_000.0, 3_000.0, 21)[1:]
    exponential = np.geomspace(3_000.0, 20_000.0, 21)[1:]
    return np.concatenate([linear_fine, linear_coarse, exponential])


class Histogram:
    """Append-only sample store with fixed bin boundaries."""

    def __init__(
        self,
        name: str,
        *,
        unit: str = UNIT_MS_SMALLER_IS_BETTER,
        description: str = "",
        boundaries: Sequence[float] | np.ndarray | None = None,
    ) -> None:
        self.name = name
        self.unit = unit
        self.description = description
        self._boundaries = np.asarray(
            loading_bin_boundaries() if boundaries is None else boundaries, dtype=float
        )
        if self._boundaries.ndim != 1 or self._boundaries.size < 2:
            raise ValueError("histogram needs at least two bin boundaries")
        if np.any(np.diff(self._boundaries) <= 0.0):
            raise ValueError("histogram bin boundaries must be strictly increasing")
        self._samples: list[MetricSample] = []
        self._lock = threading.Lock()

    @property
    def boundaries(self) -> np.ndarray:
        return self._boundaries.copy()

    @property
    def samples(self) -> tuple[MetricSample, ...]:
        with self._lock:
            return tuple(self._samples)

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._samples)

    def add_sample(self, value: float, diagnostics: Mapping[str, Any] | None = None) -> None:
        if math.isnan(value):
            raise ValueError(f"{self.name}: NaN sample")
        sample = MetricSample(value=float(value), diagnostics=dict(diagnostics or {}))
        with self._lock:
            self._samples.append(sample)

    def add_samples(self, samples: Sequence[MetricSample]) -> None:
        for sample in samples:
            self.add_sample(sample.value, sample.diagnostics)

    def values(self) -> np.ndarray:
        with self._lock:
            return np.fromiter((sample.value for sample in self._samples), dtype=float)

    def bin_counts(self) -> np.ndarray:
        """Counts for underflow, each ``[b_i, b_i+1)`` bin, then overflow."""
        values = self.values()
        indexes = np.searchsorted(self._boundaries, values, side="right")
        return np.bincount(indexes, minlength=self._boundaries.size + 1)

    def stats(self) -> HistogramStats:
        values = self.values()
        finite = values[np.isfinite(values)]
        if finite.size == 0:
            return HistogramStats(
                count=int(values.size),
                finite_count=0,
                sum=0.0,
                mean=0.0,
                min=0.0,
                max=0.0,
                p50=0.0,
                p90=0.0,
                p95=0.0,
            )
        p50, p90, p95 = np.percentile(finite, [50.0, 90.0, 95.0])
        return HistogramStats(
            count=int(values.size),
            finite_count=int(finite.size),
            sum=float(finite.sum()),
            mean=float(finite.mean()),
            min=float(finite.min()),
            max=float(finite.max()),
            p50=float(p50),
            p90=float(p90),
            p95=float(p95),
        )

    def as_dict(self, *, include_samples: bool = False) -> dict[str, Any]:
        stats = self.stats()
        payload: dict[str, Any] = {
            "name": self.name,
            "unit": self.unit,
            "description": self.description,
            "count": stats.count,
            "finite_count": stats.finite_count,
            "sum": stats.sum,
            "mean": stats.mean,
            "min": stats.min,
            "max": stats.max,
            "p50": stats.p50,
            "p90": stats.p90,
            "p95": stats.p95,
            "boundaries": self._boundaries.tolist(),
            "bin_counts": self.bin_counts().tolist(),
        }
        if include_samples:
            payload["samples"] = [
                {"value": sample.value, "diagnostics": dict(sample.diagnostics)}
                for sample in self.samples
            ]
        return payload


class HistogramSet:
    """Named histograms; insertion is serialised for parallel producers."""

    def __init__(self) -> None:
        self._histograms: dict[str, Histogram] = {}
        self._lock = threading.Lock()

    def add_histogram(self, histogram: Histogram) -> None:
        with self._lock:
            if histogram.name in self._histograms:
                raise ValueError(f"histogram already registered: {histogram.name}")
            self._histograms[histogram.name] = histogram

    def get(self, name: str) -> Histogram | None:
        with self._lock:
            return self._histograms.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._histograms)

    def __iter__(self) -> Iterator[Histogram]:
        with self._lock:
            return iter(tuple(self._histograms.values()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._histograms)

    def as_dicts(self, *, include_samples: bool = False) -> list[dict[str, Any]]:
        return [histogram.as_dict(include_samples=include_samples) for histogram in self]
