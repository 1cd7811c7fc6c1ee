import json
import unittest

from apigee_oauth.utils import *
from apigee_oauth.interpreters import (
    interpret_token_response,
    interpret_redirect_response,
    interpret_verify_response,
    remap_error_code,
)
from apigee_oauth.schemas.oauth import Token, VerificationResult, OAuthError


class TestTokenResponse(unittest.TestCase):
    def test_success_normalizes_token(self):
        body = json.dumps(
            {
                KEY_TOKEN_ACCESS: "new_access_token",
                KEY_TTL: "3599",
                KEY_TOKEN_TYPE: "BearerToken",
                KEY_TOKEN_REFRESH: "new_refresh_token",
                "attributes": json.dumps({"tier": "gold"}),
                "issued_at": "1700000000000",
            }
        )

        token, error = interpret_token_response(200, body, GRANT_PASSWORD)

        self.assertIsNone(error)
        self.assertIsInstance(token, Token)
        self.assertEqual(token.expires_in, 3599)
        self.assertIsInstance(token.expires_in, int)
        self.assertEqual(token.token_type, "password")
        self.assertEqual(token.refresh_token, "new_refresh_token")
        self.assertEqual(token.attributes, {"tier": "gold"})
        self.assertEqual(token.model_extra["issued_at"], "1700000000000")

    def test_success_without_body(self):
        token, error = interpret_token_response(200, "", GRANT_CLIENT_CREDENTIALS)

        self.assertIsNone(token)
        self.assertIsNone(error)

    def test_fractional_expires_in_truncates(self):
        for expires_in in ("3599.5", 3599.5):
            body = json.dumps({KEY_TOKEN_ACCESS: "at", KEY_TTL: expires_in})

            token, error = interpret_token_response(200, body, GRANT_CLIENT_CREDENTIALS)

            self.assertIsNone(error)
            self.assertEqual(token.access_token, "at")
            self.assertEqual(token.expires_in, 3599)

    def test_non_numeric_expires_in_dropped(self):
        body = json.dumps({KEY_TOKEN_ACCESS: "at", KEY_TTL: "never"})

        token, error = interpret_token_response(200, body, GRANT_CLIENT_CREDENTIALS)

        self.assertIsNone(error)
        self.assertEqual(token.access_token, "at")
        self.assertIsNone(token.expires_in)

    def test_success_without_access_token(self):
        body = json.dumps({KEY_TOKEN_REFRESH: "new_refresh_token", KEY_TTL: "3599"})

        token, error = interpret_token_response(200, body, GRANT_REFRESH_TOKEN)

        self.assertIsNone(error)
        self.assertIsInstance(token, Token)
        self.assertIsNone(token.access_token)
        self.assertEqual(token.refresh_token, "new_refresh_token")
        self.assertEqual(token.token_type, "refresh_token")

    def test_invalid_token_body_logs_field_names_only(self):
        body = json.dumps(
            {
                KEY_TOKEN_ACCESS: "SECRET_ACCESS",
                KEY_TOKEN_REFRESH: "SECRET_REFRESH",
                "attributes": "not json",
            }
        )

        with self.assertLogs("apigee_oauth.interpreters", level="WARNING") as logs:
            token, error = interpret_token_response(200, body, GRANT_PASSWORD)

        self.assertIsNone(token)
        self.assertIsNone(error)
        output = "\n".join(logs.output)
        self.assertIn("attributes", output)
        self.assertNotIn("SECRET", output)
        self.assertNotIn("not json", output)

    def test_success_without_grant_type_returns_json(self):
        result, error = interpret_token_response(200, '{"revoked": true}')

        self.assertIsNone(error)
        self.assertEqual(result, {"revoked": True})

    def test_coded_backend_error(self):
        body = json.dumps({"ErrorCode": "invalid_client", "Error": "ClientId is Invalid"})

        token, error = interpret_token_response(401, body, GRANT_CLIENT_CREDENTIALS)

        self.assertIsNone(token)
        self.assertEqual(error.status_code, 401)
        self.assertEqual(error.code, "invalid_client")
        self.assertEqual(error.message, "ClientId is Invalid")

    def test_uncoded_backend_error(self):
        token, error = interpret_token_response(400, "not json", GRANT_PASSWORD)

        self.assertIsNone(token)
        self.assertEqual(error.status_code, 400)
        self.assertIsNone(error.code)
        self.assertEqual(error.message, "not json")

    def test_server_error_keeps_raw_body(self):
        body = json.dumps({"ErrorCode": "ignored", "Error": "boom"})

        _, error = interpret_token_response(500, body, GRANT_PASSWORD)

        self.assertEqual(error.status_code, 500)
        self.assertIsNone(error.code)
        self.assertEqual(error.message, body)

    def test_redirect_status_is_error(self):
        _, error = interpret_token_response(302, "", GRANT_PASSWORD)

        self.assertEqual(error.status_code, 302)


class TestRedirectResponse(unittest.TestCase):
    def test_found(self):
        location, error = interpret_redirect_response(
            302, {HEADER_LOCATION: "https://cb?code=1"}, ""
        )

        self.assertIsNone(error)
        self.assertEqual(location, "https://cb?code=1")

    def test_ok_is_error(self):
        location, error = interpret_redirect_response(200, {}, "no redirect")

        self.assertIsNone(location)
        self.assertEqual(error.status_code, 200)
        self.assertEqual(error.message, "no redirect")


class TestVerifyResponse(unittest.TestCase):
    def test_insufficient_scope(self):
        result, error = interpret_verify_response(
            200, "scope=read&client_id=abc", ["read", "write"]
        )

        self.assertIsNone(result)
        self.assertEqual(error.code, ERROR_CODE_INVALID_SCOPE)

    def test_sufficient_scope(self):
        result, error = interpret_verify_response(
            200,
            "scope=read+write+admin&attributes=%7B%22tier%22%3A%22gold%22%7D",
            "read write",
        )

        self.assertIsNone(error)
        self.assertIsInstance(result, VerificationResult)
        self.assertEqual(result.scope, "read write admin")
        self.assertEqual(result.attributes, {"tier": "gold"})

    def test_no_scope_granted(self):
        _, error = interpret_verify_response(200, "client_id=abc", ["read"])

        self.assertEqual(error.code, ERROR_CODE_INVALID_SCOPE)

    def test_no_scope_required(self):
        result, error = interpret_verify_response(200, "client_id=abc")

        self.assertIsNone(error)
        self.assertEqual(result.model_extra["client_id"], "abc")

    def test_not_ok(self):
        result, error = interpret_verify_response(401, "Invalid Access Token", ["read"])

        self.assertIsNone(result)
        self.assertEqual(error.status_code, 401)
        self.assertEqual(error.message, "Invalid Access Token")
        self.assertIsNone(error.code)


class TestRemapErrorCode(unittest.TestCase):
    def test_exact_message(self):
        error = remap_error_code(
            OAuthError(message="Invalid Scope", status_code=400),
            ERROR_CODE_INVALID_SCOPE,
            INVALID_SCOPE_MESSAGES,
        )

        self.assertEqual(error.code, ERROR_CODE_INVALID_SCOPE)
        self.assertEqual(error.status_code, 400)

    def test_pattern(self):
        error = remap_error_code(
            OAuthError(message="Invalid redirect_uri : https://x"),
            ERROR_CODE_INVALID_GRANT,
            INVALID_GRANT_MESSAGES,
            INVALID_GRANT_PATTERNS,
        )

        self.assertEqual(error.code, ERROR_CODE_INVALID_GRANT)

    def test_unknown_message_keeps_code(self):
        error = remap_error_code(
            OAuthError(message="Something else", code="invalid_client"),
            ERROR_CODE_INVALID_GRANT,
            INVALID_GRANT_MESSAGES,
            INVALID_GRANT_PATTERNS,
        )

        self.assertEqual(error.code, "invalid_client")

    def test_no_error(self):
        self.assertIsNone(remap_error_code(None, ERROR_CODE_INVALID_SCOPE))


if __name__ == "__main__":
    unittest.main()
