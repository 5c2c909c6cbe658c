"""
Authentication Routes
Handles login, registration, token verification and the current profile
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordBearer

from intranet.errors import UnauthorizedError
from intranet.security import decode_access_token
from intranet.services.auth import (
    LoginRequest,
    RegisterRequest,
    TokenData,
    VerifyTokenRequest,
    auth_service,
)
from intranet.utils.response import success_response


router = APIRouter()

# Bearer token extraction; missing tokens are reported by get_current_employee
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


async def get_current_employee(token: Optional[str] = Depends(oauth2_scheme)) -> TokenData:
    """Decode the bearer token into the caller's identity"""
    if not token:
        raise UnauthorizedError("No token provided")

    payload = decode_access_token(token)
    if not payload.get("id"):
        raise UnauthorizedError("Invalid token")

    return TokenData(
        id=payload["id"],
        email=payload.get("email"),
        employee_number=payload.get("employee_number"),
    )


@router.post("/login")
async def login(request: LoginRequest):
    """
    Login with email and password
    """
    result = await auth_service.login(request.email, request.password)
    return success_response(result, "Login successful")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest):
    """
    Register a new employee account
    """
    result = await auth_service.register(request)
    return success_response(result, "Registration successful", status.HTTP_201_CREATED)


@router.post("/verify")
async def verify_token(request: VerifyTokenRequest):
    """Verify a token and return its claims"""
    decoded = auth_service.verify_token(request.token)
    return success_response(decoded, "Token verified successfully")


@router.get("/me")
async def get_profile(current_employee: TokenData = Depends(get_current_employee)):
    """
    Get current authenticated employee details
    """
    profile = await auth_service.get_profile(current_employee.id)
    return success_response(profile, "Profile retrieved successfully")
