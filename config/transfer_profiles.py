"""
Transfer profiles describing how a source record's data fills a target record.

When a transfer is approved the merge copies "data holes" from the source into
the target: scalar fields that are empty on the target but populated on the
source, plus keys of the free-form ``custom_fields`` map. This module declares
which scalar fields participate for each transferable record kind.

Configuration is file-backed so we do not require database tables or migrations.
Operators can optionally override the defaults by providing a JSON or YAML file
path through the ``TRANSFER_PROFILE_PATH`` setting. The file maps a record kind
to its profile, for example::

    organization:
      fill_fields: [contact_phone, address, website]
      merge_custom_fields: true

Kinds that are not mentioned in the override keep their built-in profile.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, MutableMapping, Sequence

import yaml


@dataclass(frozen=True)
class TransferProfile:
    """
    Merge behaviour for one record kind.

    Attributes:
        kind: Record kind identifier (``organization``, ``hiring_manager`` or
            ``job_seeker``).
        fill_fields: Scalar attributes copied from source to target when the
            target value is empty.
        merge_custom_fields: When true the ``custom_fields`` maps are merged
            key by key.
        append_custom_fields: List-valued ``custom_fields`` keys whose source
            items are appended to the target list instead of filling a hole.
    """

    kind: str
    fill_fields: Sequence[str]
    merge_custom_fields: bool = True
    append_custom_fields: Sequence[str] = ()


ORGANIZATION_PROFILE = TransferProfile(
    kind="organization",
    fill_fields=("contact_phone", "address", "website", "nicknames", "overview"),
)

HIRING_MANAGER_PROFILE = TransferProfile(
    kind="hiring_manager",
    fill_fields=("title", "email", "phone", "mobile_phone", "department"),
)

JOB_SEEKER_PROFILE = TransferProfile(
    kind="job_seeker",
    fill_fields=(),
    merge_custom_fields=False,
    append_custom_fields=("applications",),
)

DEFAULT_PROFILES: Mapping[str, TransferProfile] = {
    ORGANIZATION_PROFILE.kind: ORGANIZATION_PROFILE,
    HIRING_MANAGER_PROFILE.kind: HIRING_MANAGER_PROFILE,
    JOB_SEEKER_PROFILE.kind: JOB_SEEKER_PROFILE,
}


class ProfileError(RuntimeError):
    """Raised when a transfer profile override cannot be parsed."""


def _load_override(path: Path) -> MutableMapping[str, object]:
    if not path.exists():
        raise ProfileError(f"Transfer profile override file {path} does not exist.")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:  # pragma: no cover - filesystem failure
        raise ProfileError(f"Unable to read transfer profile override file {path}: {exc}") from exc

    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ProfileError(f"Transfer profile override file {path} is not valid: {exc}") from exc

    if not isinstance(data, Mapping):
        raise ProfileError("Transfer profile override must be a JSON/YAML object.")
    return dict(data)


def _coerce_profile(kind: str, raw: object) -> TransferProfile:
    if not isinstance(raw, Mapping):
        raise ProfileError(f"Profile for {kind} must be an object.")
    base = DEFAULT_PROFILES[kind]

    merge_custom_fields = bool(raw.get("merge_custom_fields", base.merge_custom_fields))
    return TransferProfile(
        kind=kind,
        fill_fields=_coerce_names(kind, "fill_fields", raw.get("fill_fields", base.fill_fields)),
        merge_custom_fields=merge_custom_fields,
        append_custom_fields=_coerce_names(
            kind, "append_custom_fields", raw.get("append_custom_fields", base.append_custom_fields)
        ),
    )


def _coerce_names(kind: str, key: str, raw: object) -> tuple[str, ...]:
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        raise ProfileError(f"Expected sequence for {kind}.{key}, got {type(raw).__name__}.")
    names = []
    for item in raw:
        name = str(item).strip()
        if not name:
            raise ProfileError(f"{kind}.{key} entries must be non-empty strings.")
        if name not in names:
            names.append(name)
    return tuple(names)


def load_profiles(override_path: str | None = None) -> dict[str, TransferProfile]:
    """
    Load the active transfer profiles keyed by record kind.

    Without an override path the built-in defaults are returned.
    """

    profiles = dict(DEFAULT_PROFILES)
    if not override_path:
        return profiles

    raw = _load_override(Path(override_path))
    for kind, raw_profile in raw.items():
        if kind not in DEFAULT_PROFILES:
            raise ProfileError(f"Unknown transfer record kind {kind!r} in profile override.")
        profiles[kind] = _coerce_profile(kind, raw_profile)
    return profiles


def get_profile(kind: str, override_path: str | None = None) -> TransferProfile:
    return load_profiles(override_path)[kind]


__all__ = [
    "DEFAULT_PROFILES",
    "HIRING_MANAGER_PROFILE",
    "JOB_SEEKER_PROFILE",
    "ORGANIZATION_PROFILE",
    "ProfileError",
    "TransferProfile",
    "get_profile",
    "load_profiles",
]
