"""Deterministic idempotency keys for orchestration actions.

The key folds a caller-chosen ``bucket`` (a day, ISO week, ...) into the identity
of an action, so the same property/incident/action combination can fire once per
bucket without any "last fired at" bookkeeping.
"""

from __future__ import annotations

import hashlib
import json

from propflow.domain.errors import InvalidActionKeyInput


def build_action_key(
    *,
    property_id: str,
    incident_type: str,
    action_type: str,
    bucket: str,
) -> str:
    """Return the SHA-256 hex digest identifying one action within one bucket."""

    parts = {
        "property_id": property_id,
        "incident_type": incident_type,
        "action_type": action_type,
        "bucket": bucket,
    }
    not_text = [name for name, value in parts.items() if not isinstance(value, str)]
    if not_text:
        raise InvalidActionKeyInput(
            f"Action key components must be strings: {', '.join(not_text)}"
        )
    blank = [name for name, value in parts.items() if not value.strip()]
    if blank:
        raise InvalidActionKeyInput(f"Action key components must be non-empty: {', '.join(blank)}")

    # list encoding keeps field boundaries unambiguous
    canonical = json.dumps(
        [property_id, incident_type, action_type, bucket],
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
