import time
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from ulid import ULID

from claim_payments.api.schemas import (
    ChangePaymentStatusRequest,
    ErrorResponse,
    PaymentResponse,
    ProcessPaymentRequest,
    ProcessPaymentResponse,
)
from claim_payments.application.services import PaymentService, ProcessPaymentCommand
from claim_payments.application.unit_of_work import UnitOfWork
from claim_payments.domain.exceptions import (
    ClaimNotApprovedError,
    ClaimNotFoundError,
    DomainError,
    DuplicateTransactionReferenceError,
    IllegalStateTransitionError,
    InvalidAmountError,
    InvalidInputError,
    InvalidPaymentMethodError,
    InvalidTransactionReferenceError,
    PaymentExceedsClaimAmountError,
    PaymentNotFoundError,
)
from claim_payments.domain.models import PaymentStatus
from claim_payments.infrastructure.database import Database
from claim_payments.infrastructure.metrics import HTTP_REQUEST_DURATION, HTTP_REQUESTS_TOTAL


logger = structlog.get_logger()

# path label for requests that matched no route
UNMATCHED_PATH = "unmatched"


ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    InvalidAmountError: status.HTTP_400_BAD_REQUEST,
    InvalidTransactionReferenceError: status.HTTP_400_BAD_REQUEST,
    InvalidPaymentMethodError: status.HTTP_400_BAD_REQUEST,
    PaymentExceedsClaimAmountError: status.HTTP_400_BAD_REQUEST,
    ClaimNotFoundError: status.HTTP_404_NOT_FOUND,
    PaymentNotFoundError: status.HTTP_404_NOT_FOUND,
    ClaimNotApprovedError: status.HTTP_409_CONFLICT,
    DuplicateTransactionReferenceError: status.HTTP_409_CONFLICT,
    IllegalStateTransitionError: status.HTTP_409_CONFLICT,
}

ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
}


def _error_body(code: str, message: str) -> dict[str, dict[str, str]]:
    return {"error": {"code": code, "message": message}}


async def get_payment_service(request: Request) -> AsyncIterator[PaymentService]:
    database: Database = request.app.state.database
    async with database.session() as session:
        yield PaymentService(UnitOfWork(session))


ServiceDep = Annotated[PaymentService, Depends(get_payment_service)]

router = APIRouter(prefix="/api/v1/payments", tags=["payments"], responses=ERROR_RESPONSES)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProcessPaymentResponse)
async def process_payment(body: ProcessPaymentRequest, service: ServiceDep) -> ProcessPaymentResponse:
    """Record a payment against an approved claim."""
    cmd = ProcessPaymentCommand(
        claim_id=body.claim_id,
        amount=body.amount,
        payment_method=body.payment_method,
        transaction_reference=body.transaction_reference,
        processed_by=body.processed_by,
        notes=body.notes,
    )
    result = await service.process_payment(cmd)
    return ProcessPaymentResponse.from_result(result)


@router.get("", response_model=list[PaymentResponse])
async def list_payments(service: ServiceDep, status: str | None = None) -> list[PaymentResponse]:
    payment_status = PaymentStatus.parse(status) if status else None
    payments = await service.list_payments(status=payment_status)
    return [PaymentResponse.from_payment(p) for p in payments]


@router.get("/claim/{claim_id}", response_model=list[PaymentResponse])
async def list_payments_for_claim(claim_id: int, service: ServiceDep) -> list[PaymentResponse]:
    payments = await service.list_payments(claim_id=claim_id)
    return [PaymentResponse.from_payment(p) for p in payments]


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(payment_id: str, service: ServiceDep) -> PaymentResponse:
    payment = await service.get_payment(payment_id)
    return PaymentResponse.from_payment(payment)


@router.patch("/{payment_id}/status", response_model=PaymentResponse)
async def change_payment_status(
    payment_id: str,
    body: ChangePaymentStatusRequest,
    service: ServiceDep,
) -> PaymentResponse:
    payment = await service.change_payment_status(payment_id, PaymentStatus.parse(body.status))
    return PaymentResponse.from_payment(payment)


async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    status_code = ERROR_STATUS_MAP.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return JSONResponse(status_code=status_code, content=_error_body(exc.code, str(exc)))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({".".join(str(part) for part in err["loc"][1:]) for err in exc.errors()} - {""})
    message = f"Invalid request fields: {', '.join(fields)}" if fields else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(InvalidInputError.code, message),
    )


async def observe_request(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Bind a request id to the log context and record request metrics."""
    request_id = request.headers.get("x-request-id") or str(ULID())
    structlog.contextvars.bind_contextvars(request_id=request_id)
    start_time = time.perf_counter()
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    try:
        response = await call_next(request)
        status_code = response.status_code
        response.headers["x-request-id"] = request_id
        return response
    except Exception:
        logger.exception("unhandled_request_error", method=request.method, path=request.url.path)
        raise
    finally:
        route = request.scope.get("route")
        path = getattr(route, "path", UNMATCHED_PATH)
        duration = time.perf_counter() - start_time
        HTTP_REQUEST_DURATION.labels(method=request.method, path=path, status_code=str(status_code)).observe(duration)
        HTTP_REQUESTS_TOTAL.labels(method=request.method, path=path, status_code=str(status_code)).inc()
        structlog.contextvars.unbind_contextvars("request_id")


def create_app(database: Database, metrics_enabled: bool = True) -> FastAPI:
    """Create the FastAPI application for the payments API."""
    app = FastAPI(title="Claim Payments Service", version="1.0.0")
    app.state.database = database

    app.include_router(router)
    app.add_exception_handler(DomainError, handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.middleware("http")(observe_request)

    @app.get("/health")
    async def health() -> JSONResponse:
        if not await database.ping():
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy", "database": "down"},
            )
        return JSONResponse(content={"status": "healthy", "database": "up"})

    if metrics_enabled:

        @app.get("/metrics", response_class=PlainTextResponse)
        async def metrics() -> PlainTextResponse:
            """Prometheus metrics endpoint."""
            return PlainTextResponse(
                content=generate_latest(),
                media_type=CONTENT_TYPE_LATEST,
            )

    return app
