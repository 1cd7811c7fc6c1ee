import json
import re
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Optional


def decode_attributes(value: Any) -> Any:
    # the backend embeds custom attributes as a JSON string
    if isinstance(value, str):
        return json.loads(value)
    return value


LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


class Token(BaseModel):
    model_config = ConfigDict(extra="allow")

    access_token: Optional[str] = None
    token_type: Optional[str] = None  # grant type used to obtain the token
    expires_in: Optional[int] = None  # seconds
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
    attributes: Optional[dict[str, Any]] = None

    @field_validator("expires_in", mode="before")
    @classmethod
    def parse_expires_in(cls, value):
        # leading integer digits only, "3599.5" and 3599.5 both give 3599
        if isinstance(value, str):
            match = LEADING_INTEGER.match(value)
            return int(match.group(1)) if match else None
        if isinstance(value, float):
            return int(value)
        return value

    @field_validator("attributes", mode="before")
    @classmethod
    def parse_attributes(cls, value):
        return decode_attributes(value)


class VerificationResult(BaseModel):
    """
    Claims returned by the backend for a valid token
    """

    model_config = ConfigDict(extra="allow")

    scope: Optional[str] = None
    attributes: Optional[dict[str, Any]] = None

    @field_validator("attributes", mode="before")
    @classmethod
    def parse_attributes(cls, value):
        return decode_attributes(value)


class BackendError(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    error_code: Optional[str] = Field(default=None, alias="ErrorCode")
    error: Optional[str] = Field(default=None, alias="Error")


class OAuthError(BaseModel):
    message: str
    status_code: Optional[int] = None  # HTTP status, absent for transport errors
    code: Optional[str] = None  # OAuth error code, e.g. invalid_grant
