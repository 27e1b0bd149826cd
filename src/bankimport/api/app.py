"""HTTP interface for statement uploads and import logs."""

import logging
from typing import Iterator, Optional

from fastapi import Depends, FastAPI, File, Form, Header, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bankimport.config import Settings, load_settings
from bankimport.database.base import Database
from bankimport.database.factories import create_database
from bankimport.database.sqlalchemy_db import SQLAlchemyDatabase
from bankimport.domain.errors import DomainError, InfrastructureError
from bankimport.domain.import_logs import ImportLogService, import_log_to_dict
from bankimport.domain.statement_import import QueuedImport, StatementImportService, UploadRequest
from bankimport.jobs.factories import create_queue
from bankimport.parsers.pdf_templates import BANK_PDF_TEMPLATES, GENERIC_TEMPLATE
from bankimport.storage.factories import create_storage

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"


class AuthenticationError(Exception):
    """The request carries no tenant identity."""

    code = "UNAUTHORIZED"
    http_status = 401


def ok(data, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": True, "data": data})


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"code": code, "message": message}},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Runtime settings; read from the environment when None

    Returns:
        FastAPI application with all routes and error handlers registered
    """
    settings = settings or load_settings()
    # One engine for the app; each request gets its own session
    session_factory = create_database(settings).session_factory
    storage = create_storage(settings)

    app = FastAPI(title="bankimport", version="0.1.0")
    app.state.settings = settings
    app.state.storage = storage

    def get_db() -> Iterator[Database]:
        db = SQLAlchemyDatabase(settings.database_url, session_factory=session_factory)
        try:
            yield db
        finally:
            db.disconnect()

    def require_tenant(x_tenant_id: Optional[str] = Header(default=None)) -> str:
        if not x_tenant_id or not x_tenant_id.strip():
            raise AuthenticationError("Missing tenant identity")
        return x_tenant_id.strip()

    def current_user(x_user_id: Optional[str] = Header(default=None)) -> str:
        return (x_user_id or "").strip() or ANONYMOUS_USER

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return error_response(exc.http_status, exc.code, str(exc))

    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError):
        return error_response(exc.http_status, exc.code, str(exc))

    @app.exception_handler(InfrastructureError)
    async def handle_infrastructure_error(request: Request, exc: InfrastructureError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return error_response(exc.http_status, exc.code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        return error_response(400, "VALIDATION_ERROR", "Invalid request")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("%s %s failed unexpectedly", request.method, request.url.path, exc_info=exc)
        return error_response(500, "INTERNAL_ERROR", "Internal server error")

    @app.post("/api/files/upload")
    def upload_statement(
        file: Optional[UploadFile] = File(default=None),
        account_id: Optional[str] = Form(default=None, alias="accountId"),
        default_category_id: Optional[str] = Form(default=None, alias="defaultCategoryId"),
        template_id: Optional[str] = Form(default=None, alias="templateId"),
        tenant_id: str = Depends(require_tenant),
        user_id: str = Depends(current_user),
        db: Database = Depends(get_db),
    ):
        request = UploadRequest(
            tenant_id=tenant_id,
            user_id=user_id,
            account_id=account_id,
            file_name=file.filename if file is not None else None,
            content=file.file.read() if file is not None else b"",
            default_category_id=default_category_id or None,
            pdf_template_id=template_id or None,
        )
        service = StatementImportService(
            db, storage=storage, queue=create_queue(settings, db), settings=settings
        )
        result = service.import_statement(request)
        if isinstance(result, QueuedImport):
            return ok(result.to_dict(), status_code=202)
        return ok(result.to_dict())

    @app.get("/api/files/uploads")
    def list_uploads(tenant_id: str = Depends(require_tenant)):
        if storage is None:
            return ok([])
        uploads = [
            {
                "key": obj.key,
                "fileName": obj.metadata.get("fileName", obj.key.rsplit("/", 1)[-1]),
                "size": obj.size,
                "lastModified": obj.last_modified.isoformat(),
                "metadata": obj.metadata,
            }
            for obj in storage.list(f"{tenant_id}/")
        ]
        return ok(uploads)

    @app.get("/api/logs/import")
    def list_import_logs(
        limit: int = Query(default=100, ge=0),
        offset: int = Query(default=0, ge=0),
        tenant_id: str = Depends(require_tenant),
        db: Database = Depends(get_db),
    ):
        logs = ImportLogService(db).list_logs(tenant_id, limit=limit, offset=offset)
        return ok([import_log_to_dict(log) for log in logs])

    @app.get("/api/logs/import/{log_id}")
    def get_import_log(
        log_id: str,
        tenant_id: str = Depends(require_tenant),
        db: Database = Depends(get_db),
    ):
        log = ImportLogService(db).get_log(tenant_id, log_id)
        return ok(import_log_to_dict(log))

    @app.get("/api/pdf/templates")
    def list_pdf_templates():
        templates = [template.to_dict() for template in (*BANK_PDF_TEMPLATES, GENERIC_TEMPLATE)]
        return ok(templates)

    return app
