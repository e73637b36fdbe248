from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from approved_revs import __version__
from approved_revs.api.deps import ActorResolver
from approved_revs.api.routers import approvals, health
from approved_revs.common.logger import get_logger, setup_from_settings
from approved_revs.core.approval import ApprovedRevs
from approved_revs.core.exceptions import ItemNotFoundError
from approved_revs.core.interfaces import ItemDirectory

logger = get_logger("api")


async def item_not_found_handler(request: Request, exc: ItemNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


def create_app(
    engine: ApprovedRevs,
    actor_resolver: ActorResolver,
    items: ItemDirectory,
    *,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Build the approval API around an engine.

    Args:
        engine: Process-level approval engine
        actor_resolver: Maps an incoming request to the acting user
        items: Resolves item ids in the URL to items
        configure_logging: Set up the package logger from engine settings

    Returns:
        FastAPI application
    """
    settings = engine.settings
    if configure_logging:
        setup_from_settings(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Approval workflow for page revisions and file versions",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.engine = engine
    app.state.actor_resolver = actor_resolver
    app.state.items = items

    app.add_exception_handler(ItemNotFoundError, item_not_found_handler)

    app.include_router(health.router)
    app.include_router(approvals.router, prefix="/api")

    logger.info("%s API ready (debug=%s)", settings.app_name, settings.debug)
    return app
