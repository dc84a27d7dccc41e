"""
REST API implementation for the Registrar service using FastAPI.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.entities import RESOURCES, create_fields, patch_fields
from ..core.enums import ResourceType
from ..core.exceptions import (
    DependencyError, PersistenceError, RegistrarException,
    ResourceNotFoundError, ValidationError,
)
from ..core.interfaces import RecordStore
from ..services import RecordService, ReferentialIntegrityValidator

logger = logging.getLogger(__name__)


_STATUS_BY_ERROR = (
    (ResourceNotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (DependencyError, status.HTTP_400_BAD_REQUEST),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)

_MISSING_ERROR_TYPES = ("missing", "string_too_short")


def _counts_as_missing(error: Dict[str, Any]) -> bool:
    if error.get("type") in _MISSING_ERROR_TYPES:
        return True
    # null or "" sent for a required field
    return "input" in error and error["input"] in (None, "")


def request_errors_to_validation_error(errors: List[Dict[str, Any]], creating: bool) -> ValidationError:
    """Collapse pydantic's error list into the API's single 400 error.

    On create, absent, null or empty required fields are reported together as
    missing; anything else reports the first offending field as invalid.
    """
    missing: List[str] = []
    invalid: List[str] = []

    for error in errors:
        loc = tuple(error.get("loc", ()))
        if len(loc) < 2:
            invalid.append("request body")
            continue

        field = str(loc[1])
        if loc[0] == "body" and creating and _counts_as_missing(error):
            if field not in missing:
                missing.append(field)
        elif field not in invalid:
            invalid.append(field)

    if missing:
        return ValidationError("Missing required fields", error_code="missing_fields", details={"fields": missing})
    return ValidationError(f"Invalid {invalid[0] if invalid else 'request'}", error_code="invalid_field")


class RegistrarRestAPI:
    """REST API implementation for the Registrar service."""

    def __init__(self, store: RecordStore, cors_origins: Optional[List[str]] = None):
        self._store = store
        self._validator = ReferentialIntegrityValidator(store)
        self._services: Dict[ResourceType, RecordService] = {}

        # Single writer: file-backed mutations are read-modify-write of a whole file
        self._lock = threading.RLock()

        self.app = FastAPI(
            title="Registrar API",
            description="Teachers, courses, students and tests with referential integrity",
            version=__version__,
            docs_url="/docs",
            redoc_url="/redoc"
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins or ["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_exception_handlers()
        self._setup_routes()

    @property
    def store(self) -> RecordStore:
        return self._store

    def service(self, resource_type: ResourceType) -> RecordService:
        return self._services[resource_type]

    def _resolve_expand(self, expand: Optional[bool]) -> bool:
        return self._store.expand_by_default if expand is None else expand

    def _setup_exception_handlers(self):
        """Map the error taxonomy onto status codes and ``{"error": ...}`` bodies."""

        @self.app.exception_handler(RequestValidationError)
        async def request_validation_handler(request: Request, exc: RequestValidationError):
            error = request_errors_to_validation_error(exc.errors(), creating=request.method == "POST")
            return await registrar_exception_handler(request, error)

        @self.app.exception_handler(RegistrarException)
        async def registrar_exception_handler(request: Request, exc: RegistrarException):
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
            for error_type, code in _STATUS_BY_ERROR:
                if isinstance(exc, error_type):
                    status_code = code
                    break

            if status_code >= 500:
                logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
                return JSONResponse(status_code=status_code, content={"error": "Internal server error"})

            content = {"error": exc.message}
            content.update(exc.details)
            return JSONResponse(status_code=status_code, content=content)

        @self.app.exception_handler(Exception)
        async def unhandled_exception_handler(request: Request, exc: Exception):
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Internal server error"},
            )

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/", response_model=Dict[str, str])
        async def root():
            """Root endpoint."""
            return {
                "message": "Registrar API",
                "version": __version__,
                "backend": self._store.backend.value,
                "docs": "/docs"
            }

        @self.app.get("/health", response_model=Dict[str, str])
        async def health_check():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

        for resource_type in RESOURCES:
            self._register_resource(resource_type)

    def _register_resource(self, resource_type: ResourceType):
        """Register list/get/create/update/delete routes for one resource."""
        service = RecordService(self._store, resource_type, self._validator)
        self._services[resource_type] = service

        definition = service.definition
        create_model = definition.create_model
        patch_model = definition.patch_model
        record_model = definition.record_model
        prefix = f"/{definition.name}"
        tags = [definition.label + "s"]

        @self.app.get(prefix, response_model=List[record_model], tags=tags, name=f"list_{definition.name}")
        async def list_records(expand: Optional[bool] = None):
            return service.list(expand=self._resolve_expand(expand))

        @self.app.get(prefix + "/{record_id}", response_model=record_model, tags=tags,
                      name=f"get_{definition.name}")
        async def get_record(record_id: str, expand: Optional[bool] = None):
            return service.get(record_id, expand=self._resolve_expand(expand))

        @self.app.post(prefix, response_model=record_model, status_code=status.HTTP_201_CREATED,
                       tags=tags, name=f"create_{definition.name}")
        async def create_record(payload: create_model):
            with self._lock:
                return service.create(create_fields(payload, definition))

        def existing_record_id(record_id: str) -> str:
            # resolved before the body, so an unknown id is 404 whatever the body holds
            service.get(record_id)
            return record_id

        @self.app.put(prefix + "/{record_id}", response_model=record_model, tags=tags,
                      name=f"update_{definition.name}")
        async def update_record(payload: patch_model, record_id: str = Depends(existing_record_id)):
            with self._lock:
                return service.update(record_id, patch_fields(payload, definition))

        @self.app.delete(prefix + "/{record_id}", response_model=Dict[str, str], tags=tags,
                         name=f"delete_{definition.name}")
        async def delete_record(record_id: str):
            with self._lock:
                service.delete(record_id)
            return {"message": definition.deleted_message}
