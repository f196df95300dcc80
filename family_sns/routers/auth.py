"""Auth router - family registration, joining, login and credential verification."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from family_sns.core.deps import get_bearer_token, get_db
from family_sns.core.exceptions import AuthenticationError, UserNotFound
from family_sns.core.rate_limit import auth_rate_limit, limiter
from family_sns.schemas.auth import (
    AuthResponse,
    JoinFamilyRequest,
    LoginRequest,
    RegisterRequest,
    VerifyResponse,
)
from family_sns.services import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
@limiter.limit(auth_rate_limit)
def register(
    request: Request,
    data: RegisterRequest,
    db: Session = Depends(get_db),
):
    """Create a new family with the caller as admin."""
    result = auth_service.register_family_admin(
        db,
        email=data.email,
        password=data.password,
        name=data.name,
        family_name=data.family_name,
    )
    return AuthResponse(message="Registration successful", token=result.token, user=result.user)


@router.post("/join-family", response_model=AuthResponse, status_code=201)
@limiter.limit(auth_rate_limit)
def join_family(
    request: Request,
    data: JoinFamilyRequest,
    db: Session = Depends(get_db),
):
    """Create a member account in an existing family."""
    result = auth_service.join_family(
        db,
        email=data.email,
        password=data.password,
        name=data.name,
        family_code=data.family_code,
    )
    return AuthResponse(message="Joined family successfully", token=result.token, user=result.user)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(auth_rate_limit)
def login(
    request: Request,
    data: LoginRequest,
    db: Session = Depends(get_db),
):
    result = auth_service.login(db, email=data.email, password=data.password)
    return AuthResponse(message="Login successful", token=result.token, user=result.user)


@router.get("/verify", response_model=VerifyResponse)
def verify(request: Request, db: Session = Depends(get_db)):
    """Check a bearer credential and return the user it belongs to."""
    token = get_bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="No token provided")

    try:
        user = auth_service.verify_credential(db, token)
    except UserNotFound:
        raise HTTPException(status_code=401, detail="User not found")
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=e.message)

    return VerifyResponse(user=user)
