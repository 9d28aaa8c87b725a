"""Request context management.

Each application built by `~pvdashboard.main.create_app` gets its own
`ContextDependency`, which holds the process context created at startup and
exposes it to route handlers.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from safir.dependencies.logger import logger_dependency
from structlog.stdlib import BoundLogger

from ..config import Config
from ..factory import ProcessContext
from ..models.domain.dashboard import Snapshot
from ..templates import DashboardRenderer

__all__ = ["ContextDependency", "RequestContext"]


@dataclass(slots=True)
class RequestContext:
    """Holds the incoming request and its surrounding context."""

    request: Request
    """Incoming request."""

    logger: BoundLogger
    """Request logger."""

    renderer: DashboardRenderer
    """Renderer for the dashboard page."""

    snapshot: Snapshot
    """Volumes and claims gathered at startup."""


class ContextDependency:
    """Provide a per-request context as a FastAPI dependency.

    The portions of the context shared across all requests are collected
    into a `~pvdashboard.factory.ProcessContext` that is created when the
    application starts and reused with each request.
    """

    def __init__(self) -> None:
        self._process_context: ProcessContext | None = None

    async def __call__(
        self,
        request: Request,
        logger: Annotated[BoundLogger, Depends(logger_dependency)],
    ) -> RequestContext:
        """Create a per-request context and return it."""
        if not self._process_context:
            raise RuntimeError("ContextDependency not initialized")
        return RequestContext(
            request=request,
            logger=logger,
            renderer=self._process_context.renderer,
            snapshot=self._process_context.snapshot,
        )

    @property
    def is_initialized(self) -> bool:
        """Whether the process context has been initialized."""
        return self._process_context is not None

    async def initialize(self, config: Config) -> None:
        """Initialize the process-global shared context.

        Parameters
        ----------
        config
            Dashboard configuration.
        """
        if self._process_context:
            await self._process_context.aclose()
        self._process_context = await ProcessContext.from_config(config)

    async def aclose(self) -> None:
        """Clean up the per-process context."""
        if self._process_context:
            await self._process_context.aclose()
        self._process_context = None
