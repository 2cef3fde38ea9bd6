# vectordb_sdk/core/__init__.py
# SPDX-License-Identifier: Apache-2.0
"""Cross-cutting helpers: metrics sink and error context."""

from vectordb_sdk.core.error_context import attach_context, clear_context, get_context, has_context
from vectordb_sdk.core.metrics import MetricsSink, NoopMetrics

__all__ = [
    "MetricsSink",
    "NoopMetrics",
    "attach_context",
    "get_context",
    "has_context",
    "clear_context",
]
