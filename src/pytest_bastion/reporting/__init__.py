"""Reporting module for pytest-bastion."""

from __future__ import annotations

from pytest_bastion.reporting.metrics import CallMetrics, MetricsListener, RunMetrics

__all__ = [
    "CallMetrics",
    "MetricsListener",
    "RunMetrics",
]
