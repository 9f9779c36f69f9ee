import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from coursehub.api.routes import course_content, courses, enrollments, submissions
from coursehub.core.config import Settings, get_settings
from coursehub.core.errors import ApiError, InternalError, ValidationError
from coursehub.db.seed import seed_if_needed
from coursehub.db.session import Database

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title=settings.app_name, version="0.1.0")
    app.state.settings = settings
    app.state.database = database or Database(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_, exc: RequestValidationError):
        fields = [
            {"field": ".".join(str(part) for part in err.get("loc", ())[1:]), "message": err.get("msg", "")}
            for err in exc.errors()
        ]
        error = ValidationError("Validation errors", fields=fields)
        return JSONResponse(status_code=error.status_code, content=error.to_payload())

    @app.exception_handler(SQLAlchemyError)
    async def handle_storage_error(_, exc: SQLAlchemyError):
        logger.exception("Storage failure", exc_info=exc)
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content=error.to_payload())

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.on_event("startup")
    def on_startup() -> None:
        if settings.app_env == "production" and settings.jwt_secret == "change-me":
            raise RuntimeError("JWT_SECRET must be set in production")

        if settings.seed_data:
            try:
                with app.state.database.session() as db:
                    seed_if_needed(db)
            except SQLAlchemyError as exc:
                raise RuntimeError("Database schema is not ready. Run: alembic upgrade head") from exc

    app.include_router(courses.router)
    app.include_router(course_content.router)
    app.include_router(enrollments.router)
    app.include_router(submissions.router)
    return app


app = create_app()
