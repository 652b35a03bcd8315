from fastapi import APIRouter, Depends, Request, status
from storefront.api.deps import get_account_service, get_password_reset_service
from storefront.api.v1.schemas import (
    RegisterPayload, LoginPayload, LoginResponse, MessageResponse,
    ForgotPasswordPayload, VerifyOtpPayload, ResetPasswordPayload,
)
from storefront.core.config import settings
from storefront.core.limiting import limiter
from storefront.services.accounts import AccountService
from storefront.services.password_reset import PasswordResetService

router = APIRouter()

@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterPayload, accounts: AccountService = Depends(get_account_service)):
    accounts.register(payload.name, str(payload.email), payload.password)
    return {"message": "User registered successfully"}

@router.post("/login", response_model=LoginResponse)
def login(payload: LoginPayload, accounts: AccountService = Depends(get_account_service)):
    return {"user": accounts.login(str(payload.email), payload.password)}

@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit(settings.RESET_RATE_LIMIT)
def forgot_password(
    request: Request,
    payload: ForgotPasswordPayload,
    reset: PasswordResetService = Depends(get_password_reset_service),
):
    reset.request_code(str(payload.email))
    return {"message": "OTP sent to your email"}

@router.post("/verify-otp", response_model=MessageResponse)
def verify_otp(payload: VerifyOtpPayload, reset: PasswordResetService = Depends(get_password_reset_service)):
    reset.verify_code(str(payload.email), payload.otp)
    return {"message": "OTP verified"}

@router.post("/reset-password", response_model=MessageResponse)
def reset_password(payload: ResetPasswordPayload, reset: PasswordResetService = Depends(get_password_reset_service)):
    reset.reset_password(str(payload.email), payload.otp, payload.new_password)
    return {"message": "Password reset successfully"}
