import logging
from logging import NullHandler

from apigee_oauth.base_client import RuntimeClient, create
from apigee_oauth.file_client import FileClient
from apigee_oauth.redis_client import RedisClient

from apigee_oauth.schemas.oauth import Token, VerificationResult, OAuthError
from apigee_oauth.oauth_exception import OAuthException, ConfigurationError

from apigee_oauth.utils import get_code_from_url

from apigee_oauth.schemas.grants import (
    ClientCredentialsRequest,
    PasswordRequest,
    AuthorizationCodeRequest,
    AuthorizationCodeGenerationRequest,
    ImplicitGrantRequest,
    RefreshTokenRequest,
    InvalidateTokenRequest,
    VerifyTokenRequest,
    GrantRequest,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(NullHandler())
