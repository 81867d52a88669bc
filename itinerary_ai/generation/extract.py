"""JSON extraction and syntactic repair for raw provider text.

Strategies, first success wins:
1. Direct parse of the whole text
2. Parse of the first balanced-looking {...} / [...] span
3. Each fenced code block body on its own, then 1 and 2 on the unwrapped text
4. Syntactic repair (json-repair) of every object or array candidate

No schema knowledge lives here.
"""

import json
import re
from dataclasses import dataclass
from typing import Any

import json_repair

_FENCED_BLOCK_RE = re.compile(r"(?P<fence>`{3,})[^\n`]*\n?(?P<body>.*?)(?P=fence)", re.DOTALL)
_GREEDY_SPAN_RE = re.compile(r"(\{.*\}|\[.*\])", re.DOTALL)

_CLOSERS = {"{": "}", "[": "]"}


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of extract_json."""

    ok: bool
    value: Any = None
    was_repaired: bool = False


def unwrap_fenced_blocks(text: str) -> str:
    """Replace each fenced code block by its body, dropping fence markers."""
    return _FENCED_BLOCK_RE.sub(lambda m: m.group("body"), text).strip()


def find_balanced_span(text: str) -> str | None:
    """Return the first {...} or [...] span, depth-counted outside strings.

    If the span never closes, the remainder from its opening bracket is
    returned so the repairer can try to finish it.
    """
    start = -1
    for index, char in enumerate(text):
        if char in _CLOSERS:
            start = index
            break
    if start == -1:
        return None

    depth = 0
    in_string = False
    escape = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escape:
                escape = False
            elif char == "\\":
                escape = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "{[":
            depth += 1
        elif char in "}]":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return text[start:]


def repair_json(text: str) -> str:
    """Best-effort syntactic repair of an object or array candidate.

    Closes truncated strings and brackets and drops trailing commas. Returns
    an empty string when nothing JSON-like can be recovered.
    """
    repaired = json_repair.repair_json(text.strip(), skip_json_loads=True)
    return repaired if isinstance(repaired, str) else ""


def _fenced_bodies(text: str) -> list[str]:
    return [match.group("body") for match in _FENCED_BLOCK_RE.finditer(text)]


def _collect_candidates(text: str) -> list[str]:
    candidates: list[str] = []

    sources = [text, *_fenced_bodies(text), unwrap_fenced_blocks(text)]
    for source in sources:
        candidates.append(source)
        balanced = find_balanced_span(source)
        if balanced:
            candidates.append(balanced)
        greedy = _GREEDY_SPAN_RE.search(source)
        if greedy:
            candidates.append(greedy.group(0))

    seen: set[str] = set()
    unique: list[str] = []
    for candidate in candidates:
        candidate = candidate.strip()
        if candidate and candidate not in seen:
            seen.add(candidate)
            unique.append(candidate)
    return unique


def extract_json(raw_text: str | None) -> ExtractionResult:
    """Extract a JSON value from raw provider text.

    Args:
        raw_text: Provider completion text (may contain prose or fences)

    Returns:
        ExtractionResult with ok=False only when every strategy failed
    """
    if not raw_text or not raw_text.strip():
        return ExtractionResult(ok=False)

    candidates = _collect_candidates(raw_text)

    for candidate in candidates:
        try:
            return ExtractionResult(ok=True, value=json.loads(candidate))
        except json.JSONDecodeError:
            continue

    for candidate in candidates:
        if candidate[0] not in _CLOSERS:
            continue
        try:
            value = json.loads(repair_json(candidate))
            return ExtractionResult(ok=True, value=value, was_repaired=True)
        except json.JSONDecodeError:
            continue

    return ExtractionResult(ok=False)
