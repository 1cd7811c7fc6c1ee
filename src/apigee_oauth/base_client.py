import requests
from requests.adapters import HTTPAdapter
from collections.abc import Callable, Mapping, MutableMapping
from typing import Any, Optional, Union
import logging
from devtools import pformat
from urllib.parse import urlparse

from .utils import *

from apigee_oauth.schemas.oauth import Token, VerificationResult, OAuthError
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
    RequestDescriptor,
)
from .oauth_exception import ConfigurationError
from .request_builders import build_request
from .response_reader import read_response
from .context_variables import set_context_variables
from .interpreters import (
    interpret_token_response,
    interpret_redirect_response,
    interpret_verify_response,
    remap_error_code,
)

from .token_censor_filter import TokenCensorFilter


Callback = Callable[[Optional[OAuthError], Any], None]
Context = MutableMapping[str, str]
Interpreter = Callable[[int, Mapping[str, str], str], tuple[Any, Optional[OAuthError]]]


class RuntimeClient:
    """
    Issues, refreshes, revokes and verifies OAuth 2.0 tokens through an Apigee
    runtime backend.

    Every operation returns a `(result, error)` tuple with at most one side set.
    The optional `callback` receives `(error, result)` before the tuple is
    returned, `context` receives the `x-v.` response headers as variables and
    `timeout` overrides the client timeout for that call.
    """

    uri: str = None  # base uri the backend proxy is deployed to
    key: str = None  # api key identifying this client to the backend
    timeout: Optional[float] = None  # seconds, None waits indefinitely

    # Instantiate and configure the global filter
    token_filter = TokenCensorFilter()
    logging.getLogger(__name__).addFilter(token_filter)

    def __init__(
        self,
        uri: Optional[str] = None,
        key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        if not uri:
            raise ConfigurationError("uri parameter must be specified")
        if not key:
            raise ConfigurationError("key parameter must be specified")

        self.uri = uri.rstrip("/")
        self.key = key
        self.timeout = timeout

        # no retry strategy, retries are up to the caller
        self.adapter = HTTPAdapter()

        self.session = requests.Session()
        self.session.mount("http://", self.adapter)
        self.session.mount("https://", self.adapter)

    def create_token(
        self,
        request: GrantRequest,
        context: Optional[Context] = None,
        callback: Optional[Callback] = None,
        timeout: Optional[float] = None,
    ) -> tuple[Optional[Union[Token, str]], Optional[OAuthError]]:
        """
        Create a token for any grant type, dispatching on `request.grant_type`
        """
        operations = {
            GRANT_CLIENT_CREDENTIALS: self.create_token_client_credentials,
            GRANT_PASSWORD: self.create_token_password_credentials,
            GRANT_AUTHORIZATION_CODE: self.create_token_authorization_code,
            GRANT_IMPLICIT: self.create_token_implicit_grant,
            GRANT_REFRESH_TOKEN: self.refresh_token,
        }

        return operations[request.grant_type](
            request, context=context, callback=callback, timeout=timeout
        )

    def create_token_client_credentials(
        self,
        request: ClientCredentialsRequest,
        context: Optional[Context] = None,
        callback: Optional[Callback] = None,
        timeout: Optional[float] = None,
    ) -> tuple[Optional[Token], Optional[OAuthError]]:
        """
        Generate an access token using client credentials

        Parameters:
            request: client id and secret, optional scope, token lifetime (ms) and attributes
        """
        descriptor = build_request(request, self.key)

        return self.__dispatch(
            descriptor,
            self.__token_interpreter(descriptor),
            context=context,
            callback=callback,
            timeout=timeout,
        )

    def create_token_password_credentials(
        self,
        request: PasswordRequest,
        context: Optional[Context] = None,
        callback: Optional[Callback] = None,
        timeout: Optional[float] = None,
    ) -> tuple[Optional[Token], Optional[OAuthError]]:
        """
        Generate an access token using resource owner password credentials.
        The username and password are not checked here.
        """
        descriptor = build_request(request, self.key)

        return self.__dispatch(
            descriptor,
            self.__token_interpreter(descriptor),
            context=context,
            callback=callback,
            timeout=timeout,
        )

    def create_token_authorization_code(
        self,
        request: AuthorizationCodeRequest,
        context: Optional[Context] = None,
        callback: Optional[Callback] = None,
        timeout: Optional[float] = None,
    ) -> tuple[Optional[Token], Optional[OAuthError]]:
        """
        Exchange an authorization code from `generate_authorization_code` for a token

        Parameters:
            request: code, and the redirect uri used when the code was generated
        """
        descriptor = build_request(request, self.key)

        return self.__dispatch(
            descriptor,
            self.__token_interpreter(
                descriptor,
                ERROR_CODE_INVALID_GRANT,
                INVALID_GRANT_MESSAGES,
                INVALID_GRANT_PATTERNS,
            ),
            context=context,
            callback=callback,
            timeout=timeout,
        )

    def generate_authorization_code(
        self,
        request: AuthorizationCodeGenerationRequest,
        context: Optional[Context] = None,
        callback: Optional[Callback] = None,
        timeout: Optional[float] = None,
    ) -> tuple[Optional[str], Optional[OAuthError]]:
        """
        Start the authorization code grant, returns the uri to redirect the user agent to
        """
        descriptor = build_request(request, self.key)

        return self.__dispatch(
            descriptor,
            interpret_redirect_response,
            context=context,
            callback=callback,
            timeout=timeout,
        )

    def create_token_implicit_grant(
        self,
        request: ImplicitGrantRequest,
        context: Optional[Context] = None,
        callback: Optional[Callback] = None,
        timeout: Optional[float] = None,
    ) -> tuple[Optional[str], Optional[OAuthError]]:
        """
        Implicit grant, returns the uri to redirect the user agent to
        """
        descriptor = build_request(request, self.key)

        return self.__dispatch(
            descriptor,
            interpret_redirect_response,
            context=context,
            callback=callback,
            timeout=timeout,
        )

    def refresh_token(
        self,
        request: RefreshTokenRequest,
        context: Optional[Context] = None,
        callback: Optional[Callback] = None,
        timeout: Optional[float] = None,
    ) -> tuple[Optional[Token], Optional[OAuthError]]:
        """
        Exchange a refresh token from an earlier grant for a new token
        """
        descriptor = build_request(request, self.key)

        return self.__dispatch(
            descriptor,
            self.__token_interpreter(
                descriptor, ERROR_CODE_INVALID_SCOPE, INVALID_SCOPE_MESSAGES
            ),
            context=context,
            callback=callback,
            timeout=timeout,
        )

    def invalidate_token(
        self,
        request: InvalidateTokenRequest,
        context: Optional[Context] = None,
        callback: Optional[Callback] = None,
        timeout: Optional[float] = None,
    ) -> tuple[Optional[Any], Optional[OAuthError]]:
        """
        Revoke an access or refresh token. Returns the decoded response body, if any.
        """
        descriptor = build_request(request, self.key)

        return self.__dispatch(
            descriptor,
            self.__token_interpreter(descriptor),
            context=context,
            callback=callback,
            timeout=timeout,
        )

    def verify_token(
        self,
        request: VerifyTokenRequest,
        callback: Optional[Callback] = None,
        timeout: Optional[float] = None,
    ) -> tuple[Optional[VerificationResult], Optional[OAuthError]]:
        """
        Validate an access token and check that it carries every required scope
        """
        descriptor = build_request(request, self.key)

        def interpret(status_code: int, _: Mapping[str, str], body: str):
            return interpret_verify_response(
                status_code, body, descriptor.required_scopes
            )

        return self.__dispatch(
            descriptor,
            interpret,
            callback=callback,
            timeout=timeout,
            propagate_context=False,
        )

    def __token_interpreter(
        self,
        descriptor: RequestDescriptor,
        error_code: Optional[str] = None,
        messages: tuple[str, ...] = (),
        patterns: tuple = (),
    ) -> Interpreter:
        def interpret(status_code: int, _: Mapping[str, str], body: str):
            result, error = interpret_token_response(
                status_code, body, descriptor.grant_type
            )

            if error_code is not None:
                error = remap_error_code(error, error_code, messages, patterns)

            return result, error

        return interpret

    def __dispatch(
        self,
        descriptor: RequestDescriptor,
        interpret: Interpreter,
        context: Optional[Context] = None,
        callback: Optional[Callback] = None,
        timeout: Optional[float] = None,
        propagate_context: bool = True,
    ) -> tuple[Any, Optional[OAuthError]]:
        url = self.uri + descriptor.path

        scheme = urlparse(url).scheme
        if scheme not in SUPPORTED_SCHEMES:
            logging.getLogger(__name__).error(f"Unsupported protocol {scheme}: `{url}`")
            return self.__complete(
                callback, None, OAuthError(message=f"Unsupported protocol {scheme}:")
            )

        logging.getLogger(__name__).debug(
            f"{descriptor.method} `{url}` Payload:\n"
            + pformat(descriptor.data or descriptor.params)
        )
        logging.getLogger(__name__).debug("Headers:\n" + pformat(descriptor.headers))

        try:
            with self.session.request(
                descriptor.method,
                url,
                params=descriptor.params,
                data=descriptor.data,
                headers=descriptor.headers,
                auth=descriptor.auth,
                timeout=timeout if timeout is not None else self.timeout,
                allow_redirects=False,
                stream=True,
            ) as response:
                body = read_response(response)
        except requests.exceptions.RequestException as e:
            logging.getLogger(__name__).warning(
                f"Apigee OAuth | {descriptor.method} `{url}` | Transport error: {e}"
            )
            return self.__complete(callback, None, OAuthError(message=str(e)))

        logging.getLogger(__name__).info(
            f"Apigee OAuth | {descriptor.method} `{url}` | Status: {response.status_code}"
        )

        result, error = interpret(response.status_code, response.headers, body)

        if error is not None:
            logging.getLogger(__name__).debug("Response Error:\n" + pformat(error))
        else:
            logging.getLogger(__name__).debug("Response:\n" + pformat(result))

        if propagate_context:
            set_context_variables(response.headers, context)

        return self.__complete(callback, result, error)

    @staticmethod
    def __complete(
        callback: Optional[Callback], result: Any, error: Optional[OAuthError]
    ) -> tuple[Any, Optional[OAuthError]]:
        if callback is not None:
            callback(error, result)

        return result, error


def create(uri: str, key: str, timeout: Optional[float] = None) -> RuntimeClient:
    return RuntimeClient(uri, key, timeout=timeout)
