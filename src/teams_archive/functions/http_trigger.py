"""HTTP trigger blueprint — health check and manual archive endpoints."""

import json
import logging

import azure.functions as func

from teams_archive import __version__
from teams_archive.config import load_config
from teams_archive.orchestration.run import archive_run_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()


@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint.

    Returns service status and version.
    """
    logger.info("[health_check] health check requested")

    try:
        body = json.dumps({"status": "ok", "version": __version__})
        return func.HttpResponse(body, status_code=200, mimetype="application/json")

    except Exception:
        logger.error("[health_check] health check failed", exc_info=True)
        error_body = json.dumps({"status": "error", "message": "Internal server error"})
        return func.HttpResponse(error_body, status_code=500, mimetype="application/json")


@bp.route(route="archive", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def manual_archive(req: func.HttpRequest) -> func.HttpResponse:
    """Manual trigger endpoint — runs the archive on demand.

    Requires a function key for authentication. Executes the same run
    as the timer trigger and returns the run summary in the response.
    """
    logger.info("[manual_archive] manual archive requested")

    try:
        config = load_config()
        summary = archive_run_from_config(config).run()
        logger.info(
            "[manual_archive] archive complete; teams:%d;failed:%d",
            len(summary.teams),
            summary.failed,
        )

        body = json.dumps({"status": "ok", **summary.to_dict()})
        return func.HttpResponse(body, status_code=200, mimetype="application/json")

    except Exception:
        logger.error("[manual_archive] manual archive failed", exc_info=True)
        error_body = json.dumps({"status": "error", "message": "Internal server error"})
        return func.HttpResponse(error_body, status_code=500, mimetype="application/json")
