from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from requests.auth import HTTPBasicAuth
from typing import Annotated, Literal, Optional, Union


class ClientCredentialsRequest(BaseModel):
    grant_type: Literal["client_credentials"] = "client_credentials"
    client_id: str
    client_secret: str
    scope: Optional[str] = None
    token_lifetime: Optional[PositiveInt] = None  # milliseconds
    attributes: Optional[dict[str, str]] = None


class PasswordRequest(BaseModel):
    """
    username and password are forwarded as given, checking them is up to the caller
    """

    grant_type: Literal["password"] = "password"
    client_id: str
    client_secret: str
    username: str
    password: str
    scope: Optional[str] = None
    token_lifetime: Optional[PositiveInt] = None
    attributes: Optional[dict[str, str]] = None


class AuthorizationCodeRequest(BaseModel):
    grant_type: Literal["authorization_code"] = "authorization_code"
    client_id: str
    client_secret: str
    code: str  # from generate_authorization_code
    redirect_uri: Optional[str] = None  # must match the one used to generate the code
    token_lifetime: Optional[PositiveInt] = None
    attributes: Optional[dict[str, str]] = None


class ImplicitGrantRequest(BaseModel):
    grant_type: Literal["implicit"] = "implicit"
    client_id: str
    redirect_uri: Optional[str] = None
    scope: Optional[str] = None
    state: Optional[str] = None
    attributes: Optional[dict[str, str]] = None


class RefreshTokenRequest(BaseModel):
    grant_type: Literal["refresh_token"] = "refresh_token"
    client_id: str
    client_secret: str
    refresh_token: str
    scope: Optional[str] = None
    token_lifetime: Optional[PositiveInt] = None
    attributes: Optional[dict[str, str]] = None


GrantRequest = Annotated[
    Union[
        ClientCredentialsRequest,
        PasswordRequest,
        AuthorizationCodeRequest,
        ImplicitGrantRequest,
        RefreshTokenRequest,
    ],
    Field(discriminator="grant_type"),
]


class AuthorizationCodeGenerationRequest(BaseModel):
    client_id: str
    redirect_uri: Optional[str] = None
    scope: Optional[str] = None
    state: Optional[str] = None


class InvalidateTokenRequest(BaseModel):
    client_id: str
    client_secret: str
    token: str  # access or refresh token
    token_type_hint: Optional[str] = None


class VerifyTokenRequest(BaseModel):
    token: str
    required_scopes: Optional[Union[str, list[str]]] = None


class RequestDescriptor(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    method: Literal["GET", "POST"]
    path: str
    params: Optional[dict[str, str]] = None
    data: Optional[dict[str, str]] = None
    headers: dict[str, str] = {}
    auth: Optional[HTTPBasicAuth] = None  # client credentials for POST endpoints
    grant_type: Optional[str] = None  # written into token_type of the response
    required_scopes: Optional[list[str]] = None
