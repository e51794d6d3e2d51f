"""Progress command: completed workouts, volume and AMRAP estimates."""

import json
from dataclasses import asdict
from typing import Annotated, Optional

import typer

from ...core.metrics import amrap_history, progress_summary
from .. import views
from ..app import DataDirOption, app, get_service, require_profile


@app.command()
def progress(
    lift: Annotated[
        Optional[str],
        typer.Option("--lift", "-l", help="Only AMRAP results for SQUAT | BENCH_PRESS | DEADLIFT | POWER_CLEAN"),
    ] = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show training progress and estimated maxes from AMRAP sets.
    """
    service = get_service(data_dir)
    require_profile(service)

    workouts = service.workouts
    summary = progress_summary(service.profile, workouts)
    if lift is not None:
        lift = lift.upper()
        if lift not in views.LIFT_LABELS:
            views.print_error(f"Unknown lift {lift!r}")
            raise typer.Exit(1)
        summary.amrap_records = amrap_history(workouts, lift)

    if json_out:
        print(json.dumps(asdict(summary), indent=2))
        return

    views.print_progress(summary)
