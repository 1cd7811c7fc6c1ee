import re
from urllib.parse import urlparse, parse_qs
from typing import Optional, Union


KEY_REDIS_HOST = "host"
KEY_REDIS_PORT = "port"
KEY_REDIS_PASSWORD = "password"
KEY_REDIS_ENCRYPTION_KEY = "encryption_key"
REDIS_PARAMETERS_KEY = "parameters"

KEY_URI = "uri"
KEY_API_KEY = "key"
KEY_TIMEOUT = "timeout"

KEY_GRANT_TYPE = "grant_type"
KEY_RESPONSE_TYPE = "response_type"
KEY_CLIENT_ID = "client_id"
KEY_URI_REDIRECT = "redirect_uri"
KEY_SCOPE = "scope"
KEY_STATE = "state"
KEY_CODE = "code"
KEY_USERNAME = "username"
KEY_PASSWORD = "password"
KEY_ATTRIBUTES = "attributes"
KEY_TOKEN = "token"
KEY_TOKEN_TYPE_HINT = "tokenTypeHint"
KEY_TOKEN_ACCESS = "access_token"
KEY_TOKEN_REFRESH = "refresh_token"
KEY_TOKEN_TYPE = "token_type"
KEY_TTL = "expires_in"

GRANT_CLIENT_CREDENTIALS = "client_credentials"
GRANT_PASSWORD = "password"
GRANT_AUTHORIZATION_CODE = "authorization_code"
GRANT_IMPLICIT = "implicit"
GRANT_REFRESH_TOKEN = "refresh_token"

RESPONSE_TYPE_CODE = "code"
RESPONSE_TYPE_TOKEN = "token"

HEADER_API_KEY = "x-DNA-Api-Key"
HEADER_TOKEN_LIFETIME = "x-DNA-Token-Lifetime"
HEADER_TOKEN_ATTRIBUTES = "x-DNA-Token-Attributes"
HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_LOCATION = "Location"
CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"

CONTEXT_VARIABLE_PREFIX = "x-v."

STATUS_CODE_OK = 200
STATUS_CODE_FOUND = 302
STATUS_CODE_MULTIPLE_CHOICES = 300
STATUS_CODE_CLIENT_ERROR = 400
STATUS_CODE_UNAUTHORIZED = 401

SUPPORTED_SCHEMES = ("http", "https")

CLIENT_TOKENS_PATH = "/tokentypes/client/tokens"
PASSWORD_TOKENS_PATH = "/tokentypes/password/tokens"
AUTHCODE_TOKENS_PATH = "/tokentypes/authcode/tokens"
AUTHCODE_AUTHCODES_PATH = "/tokentypes/authcode/authcodes"
IMPLICIT_TOKENS_PATH = "/tokentypes/implicit/tokens"
REFRESH_PATH = "/tokentypes/all/refresh"
INVALIDATE_PATH = "/tokentypes/all/invalidate"
VERIFY_PATH = "/tokentypes/all/verify"

ERROR_CODE_INVALID_GRANT = "invalid_grant"
ERROR_CODE_INVALID_SCOPE = "invalid_scope"

# backend messages that map to an OAuth error code
INVALID_GRANT_MESSAGES = ("Invalid Authorization Code", "Required param : redirect_uri")
INVALID_GRANT_PATTERNS = (re.compile(r"^Invalid redirect_uri :"),)
INVALID_SCOPE_MESSAGES = ("Invalid Scope",)


# Parse redirect URL for desired parameters
def get_code_from_url(url: str) -> tuple[str, Optional[str]]:
    parsed = urlparse(url)
    queryArguments = parse_qs(parsed.query)

    state = queryArguments.get(KEY_STATE)

    return (queryArguments[KEY_CODE][0], state[0] if state else None)


def split_scopes(scopes: Optional[Union[str, list[str]]]) -> list[str]:
    if not scopes:
        return []
    if isinstance(scopes, str):
        return [scope for scope in scopes.split(" ") if scope]
    return list(scopes)


def missing_scopes(
    required: Optional[Union[str, list[str]]], granted: Optional[str]
) -> list[str]:
    """
    Required scopes that the granted scope string does not cover, in request order
    """
    granted_scopes = set(split_scopes(granted))
    return [scope for scope in split_scopes(required) if scope not in granted_scopes]
