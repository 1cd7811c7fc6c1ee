import json
from requests.auth import HTTPBasicAuth
from typing import Callable, Optional, Union

from .utils import *
from apigee_oauth.schemas.grants import (
    ClientCredentialsRequest,
    PasswordRequest,
    AuthorizationCodeRequest,
    AuthorizationCodeGenerationRequest,
    ImplicitGrantRequest,
    RefreshTokenRequest,
    InvalidateTokenRequest,
    VerifyTokenRequest,
    RequestDescriptor,
)


def encode_attributes(attributes: dict[str, str]) -> str:
    return json.dumps(attributes)


def set_optional(payload: dict, key: str, value: Optional[str]) -> None:
    # unset options never go on the wire, not even empty
    if value:
        payload[key] = value


def post_headers(
    api_key: str,
    token_lifetime: Optional[int] = None,
    attributes: Optional[dict[str, str]] = None,
) -> dict[str, str]:
    headers = {
        HEADER_API_KEY: api_key,
        HEADER_CONTENT_TYPE: CONTENT_TYPE_FORM,
    }

    if token_lifetime:
        headers[HEADER_TOKEN_LIFETIME] = str(token_lifetime)
    if attributes:
        headers[HEADER_TOKEN_ATTRIBUTES] = encode_attributes(attributes)

    return headers


def build_client_credentials(
    request: ClientCredentialsRequest, api_key: str
) -> RequestDescriptor:
    data = {KEY_GRANT_TYPE: GRANT_CLIENT_CREDENTIALS}
    if request.attributes:
        data[KEY_ATTRIBUTES] = encode_attributes(request.attributes)
    set_optional(data, KEY_SCOPE, request.scope)

    return RequestDescriptor(
        method="POST",
        path=CLIENT_TOKENS_PATH,
        data=data,
        headers=post_headers(api_key, request.token_lifetime),
        auth=HTTPBasicAuth(request.client_id, request.client_secret),
        grant_type=GRANT_CLIENT_CREDENTIALS,
    )


def build_password(request: PasswordRequest, api_key: str) -> RequestDescriptor:
    data = {
        KEY_GRANT_TYPE: GRANT_PASSWORD,
        KEY_USERNAME: request.username,
        KEY_PASSWORD: request.password,
    }
    if request.attributes:
        data[KEY_ATTRIBUTES] = encode_attributes(request.attributes)
    set_optional(data, KEY_SCOPE, request.scope)

    return RequestDescriptor(
        method="POST",
        path=PASSWORD_TOKENS_PATH,
        data=data,
        headers=post_headers(api_key, request.token_lifetime),
        auth=HTTPBasicAuth(request.client_id, request.client_secret),
        grant_type=GRANT_PASSWORD,
    )


def build_authorization_code(
    request: AuthorizationCodeRequest, api_key: str
) -> RequestDescriptor:
    data = {KEY_GRANT_TYPE: GRANT_AUTHORIZATION_CODE, KEY_CODE: request.code}
    set_optional(data, KEY_URI_REDIRECT, request.redirect_uri)
    set_optional(data, KEY_CLIENT_ID, request.client_id)

    return RequestDescriptor(
        method="POST",
        path=AUTHCODE_TOKENS_PATH,
        data=data,
        headers=post_headers(api_key, request.token_lifetime, request.attributes),
        auth=HTTPBasicAuth(request.client_id, request.client_secret),
        grant_type=GRANT_AUTHORIZATION_CODE,
    )


def build_authorization_code_generation(
    request: AuthorizationCodeGenerationRequest, api_key: str
) -> RequestDescriptor:
    params = {KEY_RESPONSE_TYPE: RESPONSE_TYPE_CODE, KEY_CLIENT_ID: request.client_id}
    set_optional(params, KEY_URI_REDIRECT, request.redirect_uri)
    set_optional(params, KEY_SCOPE, request.scope)
    set_optional(params, KEY_STATE, request.state)

    return RequestDescriptor(
        method="GET",
        path=AUTHCODE_AUTHCODES_PATH,
        params=params,
        headers={HEADER_API_KEY: api_key},
    )


def build_implicit_grant(
    request: ImplicitGrantRequest, api_key: str
) -> RequestDescriptor:
    params = {KEY_RESPONSE_TYPE: RESPONSE_TYPE_TOKEN, KEY_CLIENT_ID: request.client_id}
    if request.attributes:
        params[KEY_ATTRIBUTES] = encode_attributes(request.attributes)
    set_optional(params, KEY_URI_REDIRECT, request.redirect_uri)
    set_optional(params, KEY_SCOPE, request.scope)
    set_optional(params, KEY_STATE, request.state)

    return RequestDescriptor(
        method="GET",
        path=IMPLICIT_TOKENS_PATH,
        params=params,
        headers={HEADER_API_KEY: api_key},
    )


def build_refresh_token(
    request: RefreshTokenRequest, api_key: str
) -> RequestDescriptor:
    data = {KEY_GRANT_TYPE: GRANT_REFRESH_TOKEN, KEY_TOKEN_REFRESH: request.refresh_token}
    set_optional(data, KEY_SCOPE, request.scope)

    return RequestDescriptor(
        method="POST",
        path=REFRESH_PATH,
        data=data,
        headers=post_headers(api_key, request.token_lifetime, request.attributes),
        auth=HTTPBasicAuth(request.client_id, request.client_secret),
        grant_type=GRANT_REFRESH_TOKEN,
    )


def build_invalidate_token(
    request: InvalidateTokenRequest, api_key: str
) -> RequestDescriptor:
    data = {KEY_TOKEN: request.token}
    set_optional(data, KEY_TOKEN_TYPE_HINT, request.token_type_hint)

    return RequestDescriptor(
        method="POST",
        path=INVALIDATE_PATH,
        data=data,
        headers=post_headers(api_key),
        auth=HTTPBasicAuth(request.client_id, request.client_secret),
    )


def build_verify_token(request: VerifyTokenRequest, api_key: str) -> RequestDescriptor:
    required_scopes = split_scopes(request.required_scopes)

    params = None
    if required_scopes:
        params = {KEY_SCOPE: " ".join(required_scopes)}

    return RequestDescriptor(
        method="GET",
        path=VERIFY_PATH,
        params=params,
        headers={
            HEADER_AUTHORIZATION: f"Bearer {request.token}",
            HEADER_API_KEY: api_key,
        },
        required_scopes=required_scopes,
    )


BUILDERS: dict[type, Callable[..., RequestDescriptor]] = {
    ClientCredentialsRequest: build_client_credentials,
    PasswordRequest: build_password,
    AuthorizationCodeRequest: build_authorization_code,
    AuthorizationCodeGenerationRequest: build_authorization_code_generation,
    ImplicitGrantRequest: build_implicit_grant,
    RefreshTokenRequest: build_refresh_token,
    InvalidateTokenRequest: build_invalidate_token,
    VerifyTokenRequest: build_verify_token,
}


def build_request(
    request: Union[
        ClientCredentialsRequest,
        PasswordRequest,
        AuthorizationCodeRequest,
        AuthorizationCodeGenerationRequest,
        ImplicitGrantRequest,
        RefreshTokenRequest,
        InvalidateTokenRequest,
        VerifyTokenRequest,
    ],
    api_key: str,
) -> RequestDescriptor:
    try:
        builder = BUILDERS[type(request)]
    except KeyError:
        raise TypeError(f"No request builder for {type(request).__name__}") from None

    return builder(request, api_key)
