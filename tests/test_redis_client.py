import unittest
from unittest.mock import patch, MagicMock, mock_open
import json
from cryptography.fernet import Fernet
import responses

from apigee_oauth import RedisClient, ConfigurationError, Token, ClientCredentialsRequest
from apigee_oauth.utils import *

FAKE_PARAMETERS = {
    KEY_URI: "https://runtime.example.com/oauth",
    KEY_API_KEY: "your_api_key",
}


class TestRedisClient(unittest.TestCase):
    def setUp(self):
        key = Fernet.generate_key()

        # Mock reading from a file
        self.patcher = patch(
            "builtins.open",
            mock_open(
                read_data=json.dumps(
                    {
                        KEY_REDIS_HOST: "localhost",
                        KEY_REDIS_PORT: 6379,
                        KEY_REDIS_PASSWORD: "password",
                        KEY_REDIS_ENCRYPTION_KEY: key.decode(),
                    }
                )
            ),
        )

        self.cipher_suite = Fernet(key)

        self.mock_file = self.patcher.start()

        # Mock Redis
        self.redis_patch = patch("redis.Redis")

        self.mock_redis_constructor = self.redis_patch.start()

        self.mock_redis = MagicMock()
        self.mock_redis.get.return_value = self.cipher_suite.encrypt(
            json.dumps(FAKE_PARAMETERS).encode()
        )
        self.mock_redis_constructor.return_value = self.mock_redis

    def tearDown(self):
        self.patcher.stop()
        self.redis_patch.stop()

    def test_load_parameters(self):
        api = RedisClient("redis_config.json")

        self.mock_redis_constructor.assert_called_once_with(
            host="localhost", port=6379, password="password"
        )
        self.mock_redis.get.assert_called_once_with(REDIS_PARAMETERS_KEY)
        self.assertEqual(api.uri, "https://runtime.example.com/oauth")
        self.assertEqual(api.key, "your_api_key")
        self.assertIsNone(api.timeout)

    def test_missing_parameters(self):
        self.mock_redis.get.return_value = None

        with self.assertRaises(ConfigurationError):
            RedisClient("redis_config.json")

    def test_wrong_encryption_key(self):
        self.mock_redis.get.return_value = Fernet(Fernet.generate_key()).encrypt(
            json.dumps(FAKE_PARAMETERS).encode()
        )

        with self.assertRaises(ConfigurationError):
            RedisClient("redis_config.json")

    @responses.activate
    def test_create_token(self):
        responses.add(
            responses.POST,
            FAKE_PARAMETERS[KEY_URI] + CLIENT_TOKENS_PATH,
            json={KEY_TOKEN_ACCESS: "new_access_token", KEY_TTL: 1799},
            status=200,
        )
        api = RedisClient("redis_config.json")

        token, error = api.create_token_client_credentials(
            ClientCredentialsRequest(client_id="client_id", client_secret="client_secret")
        )

        self.assertIsNone(error)
        self.assertIsInstance(token, Token)
        self.assertEqual(token.expires_in, 1799)
        self.assertEqual(
            responses.calls[0].request.headers[HEADER_API_KEY], "your_api_key"
        )


if __name__ == "__main__":
    unittest.main()
