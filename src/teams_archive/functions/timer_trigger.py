"""Timer trigger blueprint — scheduled entry point for the nightly archive run."""

import logging

import azure.functions as func

from teams_archive.config import load_config
from teams_archive.orchestration.run import archive_run_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()


@bp.timer_trigger(
    schedule="0 0 2 * * *",
    arg_name="timer",
    run_on_startup=False,
)
def timer_trigger(timer: func.TimerRequest) -> None:
    """Scheduled trigger that archives every team.

    Runs daily at 02:00 UTC. Team failures are logged by the run itself;
    only setup failures make the invocation fail.
    """
    logger.info("Timer trigger fired")

    try:
        if timer.past_due:
            logger.warning("Timer trigger is past due")

        config = load_config()
        summary = archive_run_from_config(config).run()
        for result in summary.teams:
            logger.info(
                "Team %s: %s (%d files)",
                result.team.display_name,
                result.status.value,
                result.files_downloaded,
            )
        logger.info(
            "Archive complete — %d team(s), %d failed, archived to %s",
            len(summary.teams),
            summary.failed,
            summary.export_root,
        )

    except Exception:
        logger.exception("Timer trigger failed")
        raise
