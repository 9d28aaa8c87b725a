"""Route for the dashboard page."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from ..dependencies.context import ContextDependency, RequestContext
from ..exceptions import TemplateLoadError

__all__ = ["create_router"]


def create_router(context_dependency: ContextDependency) -> APIRouter:
    """Create the router for the dashboard.

    Parameters
    ----------
    context_dependency
        Dependency providing the request context of the application.

    Returns
    -------
    fastapi.APIRouter
        Router to mount at the root of the application.
    """
    router = APIRouter()

    @router.get(
        "/",
        response_class=HTMLResponse,
        responses={500: {"description": "Template could not be rendered"}},
        summary="Dashboard of persistent volumes and claims",
    )
    async def get_dashboard(
        context: Annotated[RequestContext, Depends(context_dependency)],
    ) -> Response:
        try:
            template = context.renderer.load()
        except TemplateLoadError:
            context.logger.exception("Error loading template")
            return PlainTextResponse(
                "Error loading template",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        try:
            page = context.renderer.render(template, context.snapshot)
        except Exception:
            # Any exception from the template or its filters.
            context.logger.exception("Error rendering template")
            return PlainTextResponse(
                "Error rendering template",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return HTMLResponse(page)

    return router
