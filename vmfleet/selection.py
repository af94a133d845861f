"""Validation of operator input.

Pure functions returning a ValidationResult; the prompt loops in
vmfleet.commands call them and re-prompt until the result is ok.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional

TAG_KEY_MAX_LENGTH = 512
TAG_VALUE_MAX_LENGTH = 256
MAX_REPORTED_OUT_OF_RANGE = 5

_RANGE_TOKEN = re.compile(r"^(\d+)\s*-\s*(\d+)$")
_INDEX_TOKEN = re.compile(r"^\d+$")
_GUID = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one piece of operator input."""

    ok: bool
    value: Any = None
    reason: str = ""

    @classmethod
    def success(cls, value: Any) -> "ValidationResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: str) -> "ValidationResult":
        return cls(ok=False, reason=reason)


def _finish(indices: List[int], size: int, out_of_range: Optional[List[str]] = None) -> ValidationResult:
    out_of_range = list(out_of_range or [])
    out_of_range.extend(str(i) for i in sorted({i for i in indices if i >= size}))
    if out_of_range:
        shown = ", ".join(out_of_range[:MAX_REPORTED_OUT_OF_RANGE])
        if len(out_of_range) > MAX_REPORTED_OUT_OF_RANGE:
            shown += ", ..."
        return ValidationResult.failure(f"Index out of range (valid: 0-{size - 1}): {shown}")

    if not indices:
        return ValidationResult.failure("No valid index entered")

    return ValidationResult.success(sorted(set(indices)))


def parse_index_selection(raw: str, size: int) -> ValidationResult:
    """Parse indices and inclusive ranges, e.g. ``"0, 3-5, 9-7"``.

    Ranges may run in either direction. Tokens that are neither an integer
    nor a range are dropped. Any index outside [0, size) rejects the whole
    input, as does an empty result. A range reaching past the list is
    rejected as a whole and never expanded.

    Returns:
        ValidationResult whose value is a sorted, de-duplicated index list
    """
    indices: List[int] = []
    out_of_range: List[str] = []
    for token in (raw or "").split(","):
        token = token.strip()
        if not token:
            continue
        match = _RANGE_TOKEN.match(token)
        if match:
            start, end = int(match.group(1)), int(match.group(2))
            if start > end:
                start, end = end, start
            if end >= size:
                out_of_range.append(f"{start}-{end}")
                continue
            indices.extend(range(start, end + 1))
        elif _INDEX_TOKEN.match(token):
            indices.append(int(token))

    return _finish(indices, size, out_of_range)


def parse_simple_selection(raw: str, size: int) -> ValidationResult:
    """Parse comma-separated bare indices, e.g. ``"0,2"``.

    Unlike parse_index_selection, a malformed token rejects the input.
    """
    indices: List[int] = []
    for token in (raw or "").split(","):
        token = token.strip()
        if not token:
            continue
        if not _INDEX_TOKEN.match(token):
            return ValidationResult.failure(f"Not a valid index: {token!r}")
        indices.append(int(token))

    return _finish(indices, size)


def _validate_text(raw: Optional[str], label: str, max_length: int) -> ValidationResult:
    if raw is None or not raw.strip():
        return ValidationResult.failure(f"Tag {label} cannot be empty")
    if len(raw) > max_length:
        return ValidationResult.failure(
            f"Tag {label} is {len(raw)} characters; the maximum is {max_length}"
        )
    return ValidationResult.success(raw)


def validate_tag_key(raw: Optional[str]) -> ValidationResult:
    """Tag key: non-blank, at most 512 characters."""
    return _validate_text(raw, "key", TAG_KEY_MAX_LENGTH)


def validate_tag_value(raw: Optional[str]) -> ValidationResult:
    """Tag value: non-blank, at most 256 characters."""
    return _validate_text(raw, "value", TAG_VALUE_MAX_LENGTH)


def validate_subscription_id(subscription_id: str) -> bool:
    """Check the GUID format of an Azure subscription ID."""
    return bool(_GUID.match(subscription_id or ""))
