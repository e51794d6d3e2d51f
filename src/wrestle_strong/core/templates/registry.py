"""
Workout template registry.

The weekly split is loaded from per-day YAML files in the bundled
``src/wrestle_strong/catalog/`` directory at import time.  If no template
can be loaded (parse error, missing field), a RuntimeError is raised; the
engine cannot generate workouts without a catalog.

User overrides: place matching files in ``~/.wrestle-strong/templates/``.
"""

from .base import WorkoutTemplate


def _build_catalog() -> tuple[WorkoutTemplate, ...]:
    from .loader import load_templates_from_yaml

    loaded = load_templates_from_yaml()
    if not loaded:
        raise RuntimeError(
            "wrestle-strong: no workout templates could be loaded from YAML. "
            "Check that src/wrestle_strong/catalog/*.yaml files are present and valid."
        )
    return tuple(loaded[day] for day in sorted(loaded))


# Catalog order (ascending day) is the order workouts are generated and served.
TEMPLATE_CATALOG: tuple[WorkoutTemplate, ...] = _build_catalog()


def template_count() -> int:
    """Number of training days per week in the catalog."""
    return len(TEMPLATE_CATALOG)
