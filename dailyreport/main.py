# dailyreport/main.py
import re
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel
from starlette.middleware.sessions import SessionMiddleware

from .api import branches, organization, reports, staff, users, utils
from .core.config import settings, logger
from .core.exceptions import (
    AccessError, AuthError, BranchDeletionError, DuplicateError, InUseError, NotFoundError, ValidationError,
)
from .db.store import OrgStore

_SNAKE_FIELD = re.compile(r"^[a-z]+(_[a-z]+)+$")


def _field_key(key: str) -> str:
    # Field names go out in the same camelCase as response bodies; ids stay as they are
    return to_camel(key) if _SNAKE_FIELD.match(key) else key


def _register_exception_handlers(app: FastAPI):

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        status_code = 409 if isinstance(exc, DuplicateError) else 422
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "errors": {_field_key(k): v for k, v in exc.errors.items()}},
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": exc.message})

    @app.exception_handler(BranchDeletionError)
    async def branch_deletion_handler(request: Request, exc: BranchDeletionError):
        return JSONResponse(
            status_code=409,
            content={
                "detail": exc.message,
                "branch": exc.branch.model_dump(by_alias=True),
                "staff": [s.model_dump(by_alias=True) for s in exc.staff],
            },
        )

    @app.exception_handler(InUseError)
    async def in_use_handler(request: Request, exc: InUseError):
        return JSONResponse(status_code=409, content={"detail": exc.message})

    @app.exception_handler(AccessError)
    async def access_error_handler(request: Request, exc: AccessError):
        return JSONResponse(status_code=403, content={"detail": exc.message})

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        return JSONResponse(status_code=401, content={"detail": exc.message})


def create_app(store: Optional[OrgStore] = None) -> FastAPI:
    """
    Build the application around `store`. Without one, the demo organisation
    is loaded (or an empty store holding only the system accounts).
    """
    app = FastAPI(
        title="Daily Reporting",
        description="Organisation, branch and staff hierarchy service for the Daily Reporting dashboard.",
        version="1.0.0",
    )

    # --- STORE ---
    if store is None:
        store = OrgStore.seeded() if settings.SEED_DEMO_DATA else OrgStore()
    app.state.store = store

    # --- MIDDLEWARE ---
    app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY)

    _register_exception_handlers(app)

    # --- ROUTERS ---
    app.include_router(users.router, tags=["Authentication"])
    app.include_router(staff.router, tags=["Staff"])
    app.include_router(branches.router, tags=["Branches"])
    app.include_router(organization.router, tags=["Organisation"])
    app.include_router(reports.router, tags=["Reports"])
    app.include_router(utils.router, tags=["Utilities"])

    logger.info(f"🚀 Daily Reporting started: {len(store.projection.users)} logins available.")
    return app


app = create_app()
