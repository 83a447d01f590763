"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from nexus.errors import ApiError, not_found_error
from nexus.repositories.memory import InMemoryStore, ReferenceIntegrityError, StoreUnavailableError
from nexus.routes import (
    auth_router,
    comments_router,
    dubbing_router,
    rendered_videos_router,
    tasks_router,
    transcription_router,
    videos_router,
)
from nexus.schemas.error import (
    RequestValidationErrorResponse,
    StoreUnavailableErrorResponse,
    ValidationErrorDetails,
    ValidationIssue,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
_VALIDATION_SCHEMA_REF = "#/components/schemas/RequestValidationErrorResponse"


def _validation_payload(exc: RequestValidationError) -> RequestValidationErrorResponse:
    issues = [
        ValidationIssue(loc=list(error.get("loc", ())), message=error.get("msg", "Invalid value"))
        for error in exc.errors()
    ]
    return RequestValidationErrorResponse(
        code="VALIDATION_ERROR",
        message="Invalid request payload",
        details=ValidationErrorDetails(errors=issues),
    )


def _apply_validation_error_schema(schema: dict) -> None:
    """Document 422 responses with the structured validation payload instead of FastAPI's default."""
    components = schema.setdefault("components", {}).setdefault("schemas", {})
    model_schema = RequestValidationErrorResponse.model_json_schema(
        ref_template="#/components/schemas/{model}",
    )
    components.update(model_schema.pop("$defs", {}))
    components["RequestValidationErrorResponse"] = model_schema

    for path_item in schema.get("paths", {}).values():
        for operation in path_item.values():
            responses = operation.get("responses", {}) if isinstance(operation, dict) else {}
            validation = responses.get("422")
            if validation is None:
                continue
            validation["content"] = {"application/json": {"schema": {"$ref": _VALIDATION_SCHEMA_REF}}}

    components.pop("HTTPValidationError", None)
    components.pop("ValidationError", None)


def create_app(store: InMemoryStore | None = None) -> FastAPI:
    app = FastAPI(title="DV-7 Nexus API", version="0.3.0")
    app.state.store = store if store is not None else InMemoryStore()

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        payload = _validation_payload(exc)
        logger.info(
            "request.validation_failed method=%s path=%s error_count=%s",
            request.method,
            request.url.path,
            len(payload.details.errors),
        )
        return JSONResponse(status_code=422, content=payload.model_dump(mode="json"))

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_unavailable(request: Request, _: StoreUnavailableError) -> JSONResponse:
        logger.warning(
            "store.unavailable method=%s path=%s code=STORE_UNAVAILABLE",
            request.method,
            request.url.path,
        )
        payload = StoreUnavailableErrorResponse(code="STORE_UNAVAILABLE", message="Entity store is unavailable")
        return JSONResponse(status_code=503, content=payload.model_dump())

    @app.exception_handler(ReferenceIntegrityError)
    async def handle_reference_integrity(request: Request, _: ReferenceIntegrityError) -> JSONResponse:
        logger.warning(
            "store.reference_rejected method=%s path=%s code=RESOURCE_NOT_FOUND",
            request.method,
            request.url.path,
        )
        error = not_found_error()
        return JSONResponse(
            status_code=error.status_code,
            content=error.payload.model_dump(mode="json", exclude_none=True),
        )

    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(videos_router, prefix=API_PREFIX)
    app.include_router(transcription_router, prefix=API_PREFIX)
    app.include_router(dubbing_router, prefix=API_PREFIX)
    app.include_router(rendered_videos_router, prefix=API_PREFIX)
    app.include_router(tasks_router, prefix=API_PREFIX)
    app.include_router(comments_router, prefix=API_PREFIX)

    def custom_openapi() -> dict:
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        _apply_validation_error_schema(schema)
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app


app = create_app()
