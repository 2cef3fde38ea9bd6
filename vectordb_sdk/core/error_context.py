# vectordb_sdk/core/error_context.py
# SPDX-License-Identifier: Apache-2.0

"""
Error context utilities.

Helpers for attaching debugging context to exceptions as they leave the client:
which operation failed, which RPC method was in flight, which collection it
targeted. The context is stored as exception attributes so the original type and
message propagate unchanged.

Typical usage
-------------

    from vectordb_sdk.core.error_context import attach_context

    try:
        client.load_collection("docs")
    except VectorClientError as exc:
        ctx = get_context(exc)
        logger.error("load failed", extra={"operation": ctx.get("operation")})

Two attributes are set:

* `__vectordb_context__` (canonical)
* `__<component>_context__` (e.g. `__vector_client_context__`)

Repeated calls merge into the existing context, so several layers (client,
bulk import, caller code) can each contribute their own keys.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, MutableMapping

logger = logging.getLogger(__name__)

_CANONICAL_ATTR = "__vectordb_context__"


def attach_context(
    exc: BaseException,
    component: str,
    **context: Any,
) -> None:
    """
    Attach debugging context to an exception.

    The `component` key is set once and never overwritten by later layers.
    Avoid passing credentials or row data as context.

    Context attachment is best-effort; a failure is logged at debug level and
    never masks the original exception.
    """
    try:
        merged_context: MutableMapping[str, Any] = {}

        existing = getattr(exc, _CANONICAL_ATTR, None)
        if isinstance(existing, Mapping):
            merged_context.update(existing)

        merged_context.setdefault("component", component)
        merged_context.update(context)

        setattr(exc, _CANONICAL_ATTR, merged_context)
        setattr(exc, f"__{component}_context__", merged_context)

    except Exception as attachment_error:  # noqa: BLE001
        logger.debug(
            "Failed to attach error context to %s: %s",
            type(exc).__name__,
            attachment_error,
            extra={"component": component},
        )


def get_context(exc: BaseException) -> Dict[str, Any]:
    """Return a copy of the canonical context, or an empty dict."""
    context = getattr(exc, _CANONICAL_ATTR, None)
    if isinstance(context, Mapping):
        return dict(context)
    return {}


def has_context(exc: BaseException) -> bool:
    return isinstance(getattr(exc, _CANONICAL_ATTR, None), Mapping)


def clear_context(exc: BaseException) -> None:
    """Remove the canonical and all component-specific context attributes."""
    context = getattr(exc, _CANONICAL_ATTR, None)
    component = context.get("component") if isinstance(context, Mapping) else None
    for attr in (_CANONICAL_ATTR, f"__{component}_context__" if component else None):
        if attr and hasattr(exc, attr):
            try:
                delattr(exc, attr)
            except AttributeError:
                logger.debug("Failed to clear %s on %s", attr, type(exc).__name__)


__all__ = ["attach_context", "get_context", "has_context", "clear_context"]
