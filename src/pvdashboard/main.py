"""The main application factory for the persistent volume dashboard."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from importlib.metadata import version
from pathlib import Path

import structlog
from fastapi import FastAPI
from safir.slack.blockkit import SlackException
from safir.slack.webhook import SlackWebhookClient

from .config import Config
from .constants import CONFIG_FILE, CONFIG_FILE_ENV_VAR, ROOT_LOGGER
from .dependencies.context import ContextDependency
from .handlers import dashboard

__all__ = ["create_app"]


def create_app(config: Config | None = None) -> FastAPI:
    """Create the FastAPI application.

    The volumes and claims are gathered from Kubernetes during application
    startup, so any failure to gather them prevents the application from
    starting.

    Parameters
    ----------
    config
        Dashboard configuration. If not given, it is loaded from the file
        named by ``PVDASHBOARD_CONFIG_FILE`` or the default configuration
        path, which need not exist.
    """
    if config is None:
        path = Path(os.getenv(CONFIG_FILE_ENV_VAR, str(CONFIG_FILE)))
        config = Config.load(path)
    config.configure_logging()
    context_dependency = ContextDependency()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger = structlog.get_logger(ROOT_LOGGER)
        try:
            await context_dependency.initialize(config)
        except Exception as e:
            logger.exception("Unable to build dashboard")
            if config.slack_webhook and isinstance(e, SlackException):
                slack_client = SlackWebhookClient(
                    config.slack_webhook.get_secret_value(),
                    config.name,
                    logger,
                )
                await slack_client.post_exception(e)
            raise
        url = f"http://{config.host}:{config.port}"
        logger.info("Serving dashboard", url=url)

        yield

        await context_dependency.aclose()

    # Only the dashboard route is served, so disable the generated API
    # documentation routes.
    app = FastAPI(
        title=config.name,
        version=version("pvdashboard"),
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.include_router(dashboard.create_router(context_dependency))
    app.state.context_dependency = context_dependency

    return app
