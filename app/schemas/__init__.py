from .auth import (
    UserRegister,
    UserLogin,
    RefreshTokenRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    GoogleLoginRequest,
    UserResponse,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "RefreshTokenRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "GoogleLoginRequest",
    "UserResponse",
]
