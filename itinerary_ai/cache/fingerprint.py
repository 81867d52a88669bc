"""Deterministic cache fingerprints for generation requests."""

import hashlib
import json

from itinerary_ai.generation.normalize import normalize_iso_currency
from itinerary_ai.models.task_types import AiTaskType, normalize_task_type

CACHE_NAMESPACE = "ai:preview"


def hash_prompt(
    prompt: str,
    currency_hint: str | None = None,
    task_type: str | AiTaskType | None = None,
) -> str:
    """SHA-256 hex digest of (prompt, normalized hint, resolved task type)."""
    payload = {
        "prompt": prompt,
        "currencyHint": normalize_iso_currency(currency_hint),
        "taskType": normalize_task_type(task_type).value,
    }
    sorted_json = json.dumps(payload, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(sorted_json.encode("utf-8")).hexdigest()


def make_cache_key(
    prompt: str,
    currency_hint: str | None = None,
    task_type: str | AiTaskType | None = None,
) -> str:
    """Namespaced cache key; identical inputs always give the same key."""
    return f"{CACHE_NAMESPACE}:{hash_prompt(prompt, currency_hint, task_type)}"
