"""
Helpers for filling a target record's "data holes" from a duplicate source.

The rule is deliberately simple: a target value is replaced only when it is
empty, and only by a non-empty source value. "Empty" means ``None`` or the
empty string; present-but-falsy values such as ``0`` or ``False`` are kept.
Custom-field maps are merged one level deep, so nested objects travel whole.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from ats_app.models import decode_json_map


def is_empty(value: Any) -> bool:
    return value is None or value == ""


@dataclass(frozen=True)
class FieldFill:
    field_name: str
    value: Any


@dataclass
class MergeSummary:
    """What a single merge changed; persisted on the transfer request."""

    filled_fields: list[str] = field(default_factory=list)
    filled_custom_fields: list[str] = field(default_factory=list)
    appended_custom_fields: list[str] = field(default_factory=list)
    repointed: dict[str, int] = field(default_factory=dict)
    cleanup_task_id: int | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "filled_fields": list(self.filled_fields),
            "filled_custom_fields": list(self.filled_custom_fields),
            "appended_custom_fields": list(self.appended_custom_fields),
            "repointed": dict(self.repointed),
            "cleanup_task_id": self.cleanup_task_id,
        }


def plan_field_fills(
    source_values: Mapping[str, Any],
    target_values: Mapping[str, Any],
    fields: Iterable[str],
) -> list[FieldFill]:
    """
    Decide which scalar fields the target should take from the source.

    Fields missing from either mapping are treated as empty.
    """
    fills: list[FieldFill] = []
    for field_name in fields:
        target_value = target_values.get(field_name)
        source_value = source_values.get(field_name)
        if is_empty(target_value) and not is_empty(source_value):
            fills.append(FieldFill(field_name, source_value))
    return fills


def merge_custom_fields(target_raw: Any, source_raw: Any) -> tuple[dict[str, Any], list[str]]:
    """
    Merge ``source_raw`` into ``target_raw`` without overwriting target values.

    Both arguments may be a decoded mapping, a JSON object string, ``None`` or
    ``""``. Returns the merged map and the keys that were filled from source.

    Raises:
        ValueError: If either payload is not a JSON object.
    """
    merged = decode_json_map(target_raw)
    source = decode_json_map(source_raw)

    filled: list[str] = []
    for key, value in source.items():
        if is_empty(merged.get(key)) and not is_empty(value):
            merged[key] = value
            filled.append(key)
    return merged, filled


def append_custom_lists(
    target_raw: Any, source_raw: Any, keys: Iterable[str]
) -> tuple[dict[str, Any], list[str]]:
    """
    Append the source's list items to the target's list for each of ``keys``.

    Target items come first. A present non-list target value becomes the first
    item of the new list. Returns the merged map and the keys that grew.

    Raises:
        ValueError: If either payload is not a JSON object.
    """
    merged = decode_json_map(target_raw)
    source = decode_json_map(source_raw)

    appended: list[str] = []
    for key in keys:
        items = source.get(key)
        if not isinstance(items, list) or not items:
            continue
        current = merged.get(key)
        if is_empty(current):
            current = []
        elif not isinstance(current, list):
            current = [current]
        merged[key] = current + items
        appended.append(key)
    return merged, appended


def apply_data_holes(
    source,
    target,
    fields: Iterable[str],
    *,
    merge_custom: bool = True,
    append_custom: Iterable[str] = (),
) -> MergeSummary:
    """
    Copy empty-on-target values from ``source`` onto ``target`` in place.

    ``source`` and ``target`` are model instances; fields the model does not
    define are skipped. Keys in ``append_custom`` are list-merged and left out
    of the hole filling. ``custom_fields`` is rewritten only when a key was
    actually filled or appended.
    """
    summary = MergeSummary()
    available = [name for name in fields if hasattr(target, name) and hasattr(source, name)]
    source_values = {name: getattr(source, name) for name in available}
    target_values = {name: getattr(target, name) for name in available}

    for fill in plan_field_fills(source_values, target_values, available):
        setattr(target, fill.field_name, fill.value)
        summary.filled_fields.append(fill.field_name)

    append_keys = tuple(append_custom)
    if not merge_custom and not append_keys:
        return summary

    merged = decode_json_map(target.custom_fields)
    source_map = decode_json_map(source.custom_fields)
    if merge_custom:
        holes = {key: value for key, value in source_map.items() if key not in append_keys}
        merged, filled_keys = merge_custom_fields(merged, holes)
        summary.filled_custom_fields.extend(filled_keys)
    if append_keys:
        merged, appended_keys = append_custom_lists(merged, source_map, append_keys)
        summary.appended_custom_fields.extend(appended_keys)

    if summary.filled_custom_fields or summary.appended_custom_fields:
        target.custom_fields = merged
    return summary


__all__ = [
    "FieldFill",
    "MergeSummary",
    "append_custom_lists",
    "apply_data_holes",
    "is_empty",
    "merge_custom_fields",
    "plan_field_fills",
]
