import json
import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union
from urllib.parse import parse_qsl
from pydantic import ValidationError

from .utils import *
from apigee_oauth.schemas.oauth import Token, VerificationResult, BackendError, OAuthError


def interpret_token_response(
    status_code: int, body: str, grant_type: Optional[str] = None
) -> tuple[Optional[Union[Token, Any]], Optional[OAuthError]]:
    """
    Decode the response of a POST token endpoint.

    Parameters:
        status_code: HTTP status of the response
        body: fully drained response body
        grant_type: grant name written into `token_type`. Without one the decoded
            JSON is returned as is (invalidate).

    A 2xx body that does not decode is an empty success: (None, None).
    """
    if status_code >= STATUS_CODE_MULTIPLE_CHOICES:
        return None, interpret_error_body(status_code, body)

    try:
        data = json.loads(body)
        if grant_type is None:
            return data, None

        data[KEY_TOKEN_TYPE] = grant_type
        token = Token(**data)
    except ValidationError as e:
        # field names only, input values may hold credentials
        fields = [(".".join(map(str, err["loc"])), err["type"]) for err in e.errors()]
        logging.getLogger(__name__).warning(
            f"Successful response ({status_code}) with an invalid token body: {fields}"
        )
        return None, None
    except (ValueError, TypeError) as e:
        # not every endpoint returns a body
        logging.getLogger(__name__).warning(
            f"Successful response ({status_code}) without a token body: {e}"
        )
        return None, None

    return token, None


def interpret_error_body(status_code: int, body: str) -> OAuthError:
    if status_code in (STATUS_CODE_CLIENT_ERROR, STATUS_CODE_UNAUTHORIZED):
        try:
            error = BackendError(**json.loads(body))
        except (ValueError, TypeError):
            error = None

        if error is not None and error.error_code is not None:
            return OAuthError(
                message=error.error if error.error is not None else body,
                status_code=status_code,
                code=error.error_code,
            )

    return OAuthError(message=body, status_code=status_code)


def interpret_redirect_response(
    status_code: int, headers: Mapping[str, str], body: str
) -> tuple[Optional[str], Optional[OAuthError]]:
    """
    Only a 302 is a success, its Location header is returned without being followed
    """
    if status_code != STATUS_CODE_FOUND:
        return None, OAuthError(message=body, status_code=status_code)

    return headers.get(HEADER_LOCATION), None


def interpret_verify_response(
    status_code: int,
    body: str,
    required_scopes: Optional[Union[str, list[str]]] = None,
) -> tuple[Optional[VerificationResult], Optional[OAuthError]]:
    """
    Decode the form encoded verify response and check that every required scope
    was granted
    """
    if status_code != STATUS_CODE_OK:
        return None, OAuthError(message=body, status_code=status_code)

    parsed = dict(parse_qsl(body, keep_blank_values=True))

    missing = missing_scopes(required_scopes, parsed.get(KEY_SCOPE))
    if missing:
        logging.getLogger(__name__).info(f"Token lacks required scopes: {missing}")
        return None, OAuthError(
            message=ERROR_CODE_INVALID_SCOPE, code=ERROR_CODE_INVALID_SCOPE
        )

    try:
        result = VerificationResult(**parsed)
    except ValueError as e:
        return None, OAuthError(message=str(e), status_code=status_code)

    return result, None


def remap_error_code(
    error: Optional[OAuthError],
    code: str,
    messages: Iterable[str] = (),
    patterns: Iterable[re.Pattern] = (),
) -> Optional[OAuthError]:
    """
    Attach `code` to an error whose message is one of the known backend messages
    """
    if error is None:
        return None

    if error.message in messages or any(
        pattern.search(error.message) for pattern in patterns
    ):
        return error.model_copy(update={"code": code})

    return error
