"""HTTP route definitions for the account service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from prometheus_client import Counter
from pydantic import BaseModel, Field
from schemas import Account as AccountResponse

from ..domain.account import Account
from ..domain.contracts import CreateAccountInput
from ..domain.errors import AccountError, AccountErrorKind
from ..domain.service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")

ACCOUNT_ERRORS = Counter(
    "account_service_errors_total",
    "Account operations rejected, by error kind.",
    ["kind"],
)

_STATUS_BY_KIND: dict[AccountErrorKind, int] = {
    AccountErrorKind.EMPTY_PASSWORD: status.HTTP_400_BAD_REQUEST,
    AccountErrorKind.MISSING_LIMIT: status.HTTP_400_BAD_REQUEST,
    AccountErrorKind.LIMIT_EXCEEDED: status.HTTP_400_BAD_REQUEST,
    AccountErrorKind.DUPLICATE_EMAIL: status.HTTP_409_CONFLICT,
    AccountErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    AccountErrorKind.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    AccountErrorKind.ACCOUNT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    AccountErrorKind.TRANSIENT_STORE_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_response(account: Account) -> AccountResponse:
    """Build a response model from the domain aggregate, dropping the password hash."""
    return AccountResponse(
        account_id=account.account_id,
        full_name=account.full_name,
        email=account.email,
        country=account.country,
        created_at=account.created_at,
        updated_at=account.updated_at,
    )


class CreateAccountRequest(BaseModel):
    """Payload accepted when registering an account."""

    full_name: str
    email: str = Field(..., min_length=1)
    password: str
    country: str = ""


class AccountPage(BaseModel):
    """Envelope for a cursor-paginated page of accounts."""

    items: list[AccountResponse]
    next_after_id: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    """Authenticated account and its bearer token."""

    account: AccountResponse
    access_token: str
    token_type: str = "bearer"


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


@router.post("/accounts", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    payload: CreateAccountRequest,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Register an account."""
    try:
        account = service.create_account(
            CreateAccountInput(
                full_name=payload.full_name,
                email=payload.email,
                password=payload.password,
                country=payload.country,
            )
        )
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return to_response(account)


@router.get("/accounts", response_model=AccountPage)
def list_accounts(
    after_id: str = Query(default=""),
    limit: int = Query(default=0),
    service: AccountService = Depends(get_service),
) -> AccountPage:
    """Return accounts after the ``after_id`` cursor in ascending id order."""
    try:
        accounts = service.list_accounts(after_id, limit)
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    next_after_id = accounts[-1].account_id if len(accounts) == limit else None
    return AccountPage(items=[to_response(a) for a in accounts], next_after_id=next_after_id)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    service: AccountService = Depends(get_service),
) -> LoginResponse:
    """Exchange email/password credentials for a bearer token."""
    try:
        result = service.login(payload.email, payload.password)
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return LoginResponse(account=to_response(result.account), access_token=result.access_token)


@router.get("/me", response_model=AccountResponse)
def current_account(
    authorization: str = Header(default=""),
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Resolve the account identified by the ``Authorization: Bearer`` token."""
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        token = ""
    try:
        account = service.resolve_from_token(token.strip())
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return to_response(account)


def _http_error_from_account_error(exc: AccountError) -> HTTPException:
    ACCOUNT_ERRORS.labels(kind=exc.kind.value).inc()
    status_code = _STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    logger.debug("account request failed: %s", exc.kind.value)
    return HTTPException(status_code=status_code, detail=exc.message, headers=headers)
