"""Composition root: wires settings, collaborator clients and the controller."""

import logging
from typing import Callable, Optional

import httpx
from dotenv import load_dotenv

from medibot.config import settings
from medibot.services.analysis import AnalysisClient, analysis_client
from medibot.services.auth import AuthClient, auth_client
from medibot.services.history import HistoryClient, history_client
from medibot.services.profile import ProfileClient, profile_client
from medibot.state.controller import ViewController

load_dotenv(override=True)

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_controller(
    redirect: Callable[[str], None],
    client: Optional[httpx.AsyncClient] = None,
) -> ViewController:
    """
    Build a ViewController.

    With no ``client`` the module singletons are used. Passing a client makes
    every collaborator share it, which is how hosts inject cookies or a
    custom transport.
    """
    if client is None:
        analysis, history, profile, auth = (
            analysis_client, history_client, profile_client, auth_client,
        )
    else:
        analysis = AnalysisClient(client)
        history = HistoryClient(client)
        profile = ProfileClient(client)
        auth = AuthClient(client)

    logger.info("MediBot controller created (backend %s)", settings.api_base_url)
    return ViewController(
        analysis=analysis,
        history=history,
        profile=profile,
        auth=auth,
        redirect=redirect,
    )
