from .oauth import Token, VerificationResult, BackendError, OAuthError
from .grants import (
    ClientCredentialsRequest,
    PasswordRequest,
    AuthorizationCodeRequest,
    AuthorizationCodeGenerationRequest,
    ImplicitGrantRequest,
    RefreshTokenRequest,
    InvalidateTokenRequest,
    VerifyTokenRequest,
    GrantRequest,
    RequestDescriptor,
)
