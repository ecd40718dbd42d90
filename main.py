import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

import config
from database import check_connection
from exceptions import InvoiceDeskError, ValidationError
from logging_config import LogContext, configure_logging, get_logger
from routers import auth, clients, invoices, payments

configure_logging(level=config.LOG_LEVEL, fmt=config.LOG_FORMAT)
logger = get_logger("api")

# App instance
app = FastAPI(title="InvoiceDesk API")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_body(exc: InvoiceDeskError) -> dict:
    return {"success": False, "error": exc.to_dict()}


@app.exception_handler(InvoiceDeskError)
async def invoicedesk_error_handler(request: Request, exc: InvoiceDeskError):
    if exc.http_status >= 500:
        logger.error("request_failed", extra={"path": request.url.path, "code": exc.code})
    return JSONResponse(status_code=exc.http_status, content=_error_body(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg")}
        for err in exc.errors()
    ]
    error = ValidationError("Request validation failed", errors=errors)
    return JSONResponse(status_code=error.http_status, content=_error_body(error))


# Request id for every log line of the request
@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    LogContext.clear()
    LogContext.set(request_id=request_id)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("unhandled_error", extra={"path": request.url.path, "method": request.method})
        raise
    finally:
        LogContext.clear()
    response.headers["X-Request-ID"] = request_id
    return response


@app.get("/health")
def health():
    if not check_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "database": False},
        )
    return {"status": "ok", "database": True}


app.include_router(auth.router)
app.include_router(clients.router)
app.include_router(invoices.router)
app.include_router(payments.router)


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=config.PORT, reload=True)
