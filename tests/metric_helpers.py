"""Small readers for the ``Metric`` families returned by the collectors."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from prometheus_client.metrics_core import Metric


def family_names(metrics: Iterable[Metric]) -> List[str]:
    return [metric.name for metric in metrics]


def series(metrics: Iterable[Metric], sample_name: str) -> List[Dict[str, str]]:
    """Label sets of every sample called ``sample_name``."""
    return [
        dict(sample.labels)
        for metric in metrics
        for sample in metric.samples
        if sample.name == sample_name
    ]


def value(metrics: Iterable[Metric], sample_name: str, **labels: str) -> Optional[float]:
    """Value of the sample with exactly these labels, or None if absent."""
    for metric in metrics:
        for sample in metric.samples:
            if sample.name == sample_name and sample.labels == labels:
                return sample.value
    return None


def total(metrics: Iterable[Metric], sample_name: str) -> float:
    """Sum over every label combination of ``sample_name``."""
    return sum(
        sample.value
        for metric in metrics
        for sample in metric.samples
        if sample.name == sample_name
    )
