"""Deduplication keys for the cooldown gate.

Built-in kinds key on the fields that identify the recurring condition (the
query, the host, the health status) and leave out per-occurrence measurements
such as durations and rates. Kinds with no identifying field key on severity
instead, so an escalation is not swallowed by the lower level's cooldown.
Unknown kinds fall back to the whole payload.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

# kind -> data fields that identify the recurring condition
SIGNATURE_FIELDS: dict[str, tuple[str, ...]] = {
    "slow_query": ("query",),
    "high_error_rate": ("query",),
    "performance_degradation": ("query",),
    "high_connection_pool_usage": (),
    "database_health_issue": ("status",),
    "database_connection_failed": ("host", "database"),
    "database_error": ("operation", "error_type"),
}


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def compute_signature(
    kind: str, data: Mapping[str, Any], severity: str | None = None
) -> str:
    """Return a stable ``"<kind>:<json>"`` key for *kind* and *data*."""
    kind = str(kind)
    fields = SIGNATURE_FIELDS.get(kind)
    if fields is None:
        return f"{kind}:{_canonical(dict(data))}"
    if not fields:
        return f"{kind}:{_canonical({'severity': str(severity or '')})}"
    return f"{kind}:{_canonical({f: data.get(f) for f in fields})}"
