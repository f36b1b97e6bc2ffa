from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

_INT_SETTINGS: dict[str, int] = {
    "DB_POOL_SIZE": 1,
    "DB_MAX_OVERFLOW": 0,
    "DB_POOL_RECYCLE": 1,
    "DB_POOL_TIMEOUT": 1,
    "REPORT_BATCH_MAX_SIZE": 1,
    "TEMPLATE_MAX_BYTES": 1,
    "TEMP_SWEEP_INTERVAL_MINUTES": 1,
    "TEMP_MAX_AGE_MINUTES": 1,
}
_FLOAT_SETTINGS = ("CONVERTER_TIMEOUT_SECONDS",)


def _validate_env() -> None:
    """
    Validate all required environment variables at startup.

    Runs before any service or database connection is initialised.
    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - A database URL must be configured (DATABASE_URL, CLOUD_DATABASE_URL
      or LOCAL_DATABASE_URL) and no empty-string values are accepted.
    - Numeric settings, when present, must parse and be positive.
    - REPORT_DATE_DISPLAY_FORMAT, when present, must contain strftime directives.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Database URL ---------------------------------------------------
    url_names = ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL")
    if not any(os.getenv(name, "").strip() for name in url_names):
        errors.append(
            "No database URL configured. Set DATABASE_URL, CLOUD_DATABASE_URL or LOCAL_DATABASE_URL."
        )

    # --- Numeric settings -----------------------------------------------
    for name, minimum in _INT_SETTINGS.items():
        raw = os.getenv(name)
        if raw is None:
            continue
        try:
            value = int(raw)
        except ValueError:
            errors.append(f"{name}='{raw}' is not an integer.")
            continue
        if value < minimum:
            errors.append(f"{name}='{raw}' must be at least {minimum}.")

    for name in _FLOAT_SETTINGS:
        raw = os.getenv(name)
        if raw is None:
            continue
        try:
            if float(raw) <= 0:
                errors.append(f"{name}='{raw}' must be greater than zero.")
        except ValueError:
            errors.append(f"{name}='{raw}' is not a number.")

    # --- Display date format --------------------------------------------
    date_format = os.getenv("REPORT_DATE_DISPLAY_FORMAT")
    if date_format is not None and "%" not in date_format:
        errors.append(
            f"REPORT_DATE_DISPLAY_FORMAT='{date_format}' contains no strftime directives."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed: missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Every report source table must exist in the database.  If any are
    missing, log a critical error and abort startup so that the operator is
    forced to run migrations before serving traffic.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect
    from sqlalchemy.exc import SQLAlchemyError

    import db.models  # noqa: F401  registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    try:
        inspector = sa_inspect(get_engine())
        actual: set[str] = set(inspector.get_table_names())
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc

    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


def _build_services(application: FastAPI) -> None:
    """Construct the template registry, converter and orchestrator on ``app.state``."""
    from app.config import get_report_settings
    from app.services.report_orchestrator import ReportOrchestrator
    from conversion.libreoffice import LibreOfficeConverter
    from db.row_source import RowSource
    from reports.registry import build_default_registry
    from templating.registry import TemplateRegistry
    from templating.storage import LocalTemplateStorage

    settings = get_report_settings()
    template_registry = TemplateRegistry(LocalTemplateStorage(settings.template_upload_path))
    template_registry.load()

    converter = LibreOfficeConverter(
        settings.libreoffice_binary,
        timeout_seconds=settings.converter_timeout_seconds,
        temp_root=settings.temp_files_path,
    )
    application.state.template_registry = template_registry
    application.state.report_orchestrator = ReportOrchestrator(
        template_registry=template_registry,
        row_source=RowSource(),
        converter=converter,
        report_types=build_default_registry(date_format=settings.date_display_format),
        batch_max_size=settings.batch_max_size,
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate the schema, build services and start the scheduler on boot; tear down on exit."""
    log = logging.getLogger(__name__)
    _check_schema()
    log.info("Database schema validated")

    _build_services(application)
    log.info(
        "Report services ready with %d template(s)",
        len(application.state.template_registry.list_all()),
    )

    from app.scheduler.jobs import build_scheduler
    from db.session import dispose_engine

    scheduler = build_scheduler()
    scheduler.start()
    log.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        log.info("Scheduler shut down")
        dispose_engine()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Report Generation API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import report_router, template_router

    application.include_router(template_router)
    application.include_router(report_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "OK", "message": "Server is running"}

    return application


app = create_app()
