"""
YAML → WorkoutTemplate loader.

Loads day templates from individual YAML files in the bundled
``src/wrestle_strong/catalog/`` directory.  Each file (e.g. day1_squat.yaml)
holds one day of the weekly split.

User overrides: place matching files in ``~/.wrestle-strong/templates/``.
A user file is deep-merged over the bundled file with the same stem, so only
changed keys need to be listed.  A user file with no bundled counterpart is
added to the catalog as an extra day.

Usage (internal, called by registry.py):
    from .loader import load_templates_from_yaml
    templates = load_templates_from_yaml()   # dict or None on failure
"""

from __future__ import annotations

import logging
import warnings
from pathlib import Path

import yaml

from ..config import data_home
from ..models import MAIN_LIFT_TYPES
from .base import AssistanceSpec, LiftSpec, SupplementarySpec, WorkoutTemplate

log = logging.getLogger(__name__)

_REQUIRED_TEMPLATE_FIELDS: frozenset[str] = frozenset(
    {"day", "name", "main_lift", "supplementary_lift", "assistance"}
)
_REQUIRED_SUPPLEMENTARY_FIELDS: frozenset[str] = frozenset(
    {"type", "name", "rep_scheme", "percentage_of_tm"}
)
_REQUIRED_ASSISTANCE_FIELDS: frozenset[str] = frozenset({"name", "sets", "reps"})


def _lift_type(raw: object) -> str:
    lift_type = str(raw)
    if lift_type not in MAIN_LIFT_TYPES:
        raise ValueError(f"unknown lift type {lift_type!r}")
    return lift_type


def _assistance_from_dict(d: dict) -> AssistanceSpec:
    missing = _REQUIRED_ASSISTANCE_FIELDS - set(d)
    if missing:
        raise ValueError(f"AssistanceSpec missing fields: {sorted(missing)}")
    spec = AssistanceSpec(
        name=str(d["name"]),
        sets=int(d["sets"]),
        reps=int(d["reps"]),
        is_bodyweight=bool(d.get("is_bodyweight", False)),
    )
    if spec.sets < 1 or spec.reps < 1:
        raise ValueError(f"assistance '{spec.name}' needs at least 1 set and 1 rep")
    return spec


def template_from_dict(d: dict) -> WorkoutTemplate:
    """Convert a raw dict (from YAML) to a WorkoutTemplate.

    Raises ValueError if any required field is absent or malformed.
    """
    missing = _REQUIRED_TEMPLATE_FIELDS - set(d)
    if missing:
        raise ValueError(f"WorkoutTemplate missing fields: {sorted(missing)}")

    main = d["main_lift"]
    if not isinstance(main, dict) or not {"type", "name"} <= set(main):
        raise ValueError("main_lift needs 'type' and 'name'")

    supp = d["supplementary_lift"]
    if not isinstance(supp, dict):
        raise ValueError("supplementary_lift must be a mapping")
    missing = _REQUIRED_SUPPLEMENTARY_FIELDS - set(supp)
    if missing:
        raise ValueError(f"supplementary_lift missing fields: {sorted(missing)}")

    day = int(d["day"])
    if day < 1:
        raise ValueError(f"day must be >= 1, got {day}")

    return WorkoutTemplate(
        day=day,
        name=str(d["name"]),
        main_lift=LiftSpec(lift_type=_lift_type(main["type"]), name=str(main["name"])),
        supplementary_lift=SupplementarySpec(
            lift_type=_lift_type(supp["type"]),
            name=str(supp["name"]),
            rep_scheme=tuple(int(r) for r in supp["rep_scheme"]),
            percentage_of_tm=float(supp["percentage_of_tm"]),
        ),
        assistance=tuple(_assistance_from_dict(a) for a in d["assistance"] or []),
    )


def _load_yaml_file(path: Path) -> dict:
    """Load a YAML file; return {} (with a warning) on read or parse errors."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        log.warning("Could not read template file %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def get_bundled_templates_dir() -> Path | None:
    """Return path to the bundled catalog/ data directory, or None if not found."""
    # loader.py lives at src/wrestle_strong/core/templates/loader.py
    # three levels up → src/wrestle_strong/
    candidate = Path(__file__).parent.parent.parent / "catalog"
    return candidate if candidate.is_dir() else None


def get_user_templates_dir() -> Path | None:
    """Return ~/.wrestle-strong/templates/ if it exists, else None."""
    p = data_home() / "templates"
    return p if p.is_dir() else None


def load_templates_from_yaml(
    bundled_dir: Path | None = None,
    user_dir: Path | None = None,
) -> dict[int, WorkoutTemplate] | None:
    """Return {day: WorkoutTemplate} loaded from per-day YAML files.

    Args:
        bundled_dir: Directory of bundled templates (default: package catalog/)
        user_dir: Directory of user overrides (default: ~/.wrestle-strong/templates/)

    Returns None (rather than raising) so the registry can decide how to fail.
    """
    if bundled_dir is None:
        bundled_dir = get_bundled_templates_dir()
    if user_dir is None:
        user_dir = get_user_templates_dir()

    if bundled_dir is None and user_dir is None:
        return None

    stems: dict[str, Path] = {}
    if bundled_dir is not None:
        for p in sorted(bundled_dir.glob("*.yaml")):
            stems[p.stem] = p

    user_only: list[Path] = []
    if user_dir is not None:
        for p in sorted(user_dir.glob("*.yaml")):
            if p.stem not in stems:
                user_only.append(p)

    raw_templates: list[tuple[str, dict]] = []
    for stem, bundled_path in stems.items():
        raw = _load_yaml_file(bundled_path)
        if not raw:
            continue
        if user_dir is not None:
            user_path = user_dir / f"{stem}.yaml"
            if user_path.exists():
                user_raw = _load_yaml_file(user_path)
                if user_raw:
                    log.info("Applying template override %s", user_path)
                    raw = _deep_merge(raw, user_raw)
        raw_templates.append((stem, raw))

    for p in user_only:
        raw = _load_yaml_file(p)
        if raw:
            raw_templates.append((p.stem, raw))

    result: dict[int, WorkoutTemplate] = {}
    for stem, raw in raw_templates:
        try:
            template = template_from_dict(raw)
        except (ValueError, TypeError) as exc:
            warnings.warn(
                f"wrestle-strong: skipping template '{stem}': {exc}",
                stacklevel=2,
            )
            continue
        if template.day in result:
            warnings.warn(
                f"wrestle-strong: template '{stem}' reuses day {template.day}; skipped",
                stacklevel=2,
            )
            continue
        result[template.day] = template

    return result if result else None
