"""HTTP surface for SQL generation.

Routes:
    GET  /              health check
    POST /generate-sql  {"question": str} -> {"sql": str} | {"error": str}
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

import sqlpowerhouse
from sqlpowerhouse.config import Settings, get_settings
from sqlpowerhouse.exceptions import InvalidQuestion, SqlPowerhouseError
from sqlpowerhouse.generator import SQLGenerator
from sqlpowerhouse.service import Services

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to generate SQL query."


class GenerateSQLRequest(BaseModel):
    """Request body for /generate-sql."""

    question: str | None = None


class GenerateSQLResponse(BaseModel):
    """Successful response: validated, read-only SQL."""

    sql: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    generator: SQLGenerator | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        generator: Pre-built generator. When omitted, one is built from
            settings at startup and its connections are disposed at shutdown.
        settings: Settings to build from. Defaults to get_settings().
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        services: Services | None = None
        if generator is None:
            services = Services(settings)
            app.state.generator = services.build_generator()
        else:
            app.state.generator = generator
        logger.info(f"SQL Powerhouse API ready ({app.state.generator.strategy} strategy)")

        yield

        if services is not None:
            services.close()
        logger.info("SQL Powerhouse API shut down")

    app = FastAPI(
        title="SQL Powerhouse API",
        description="Natural-language questions to validated, read-only SQL",
        version=sqlpowerhouse.__version__,
        lifespan=lifespan,
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, InvalidQuestion().message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return _error(exc.status_code, "Not found")
        return _error(exc.status_code, str(exc.detail))

    @app.get("/")
    def health() -> dict[str, str]:
        """Health check endpoint."""
        return {
            "status": "ok",
            "service": "sqlpowerhouse",
            "version": sqlpowerhouse.__version__,
        }

    @app.post("/generate-sql", response_model=GenerateSQLResponse)
    def generate_sql(body: GenerateSQLRequest, request: Request) -> GenerateSQLResponse | JSONResponse:
        """Generate validated SQL for a natural-language question."""
        sql_generator: SQLGenerator = request.app.state.generator
        try:
            sql = sql_generator.generate(body.question)
        except InvalidQuestion as e:
            return _error(status.HTTP_400_BAD_REQUEST, e.message)
        except SqlPowerhouseError as e:
            logger.error(f"Error generating SQL: {e.message}")
            message = GENERIC_FAILURE_MESSAGE if settings.is_production else e.message
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, message)
        except Exception as e:
            logger.exception(f"Unexpected error generating SQL: {e}")
            message = GENERIC_FAILURE_MESSAGE if settings.is_production else str(e)
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, message)

        return GenerateSQLResponse(sql=sql)

    return app
