import json
import redis
from cryptography.fernet import Fernet, InvalidToken

from .utils import *
from .base_client import RuntimeClient
from .oauth_exception import ConfigurationError


class RedisClient(RuntimeClient):
    """
    Runtime client whose uri and api key are kept Fernet encrypted in Redis
    """

    def __init__(self, redis_config_filepath: str):
        self.redis_config_filepath = redis_config_filepath
        with open(self.redis_config_filepath, "r") as fin:
            self.redis_parameters = json.load(fin)

        self.encryption_key = self.get_encryption_key()

        self.cipher_suite = Fernet(self.encryption_key)

        self.redis = self.create_redis_client()

        self.parameters = self.load_parameters()

        super().__init__(
            self.parameters.get(KEY_URI),
            self.parameters.get(KEY_API_KEY),
            timeout=self.parameters.get(KEY_TIMEOUT),
        )

    def create_redis_client(self) -> redis.Redis:
        return redis.Redis(
            host=self.redis_parameters[KEY_REDIS_HOST],
            port=self.redis_parameters[KEY_REDIS_PORT],
            password=self.redis_parameters[KEY_REDIS_PASSWORD],
        )

    def get_encryption_key(self) -> bytes:
        return self.redis_parameters[KEY_REDIS_ENCRYPTION_KEY].encode()

    def load_parameters(self) -> dict:
        encrypted_parameters = self.redis.get(REDIS_PARAMETERS_KEY)
        if encrypted_parameters is None:
            raise ConfigurationError(
                f"No runtime parameters found under Redis key `{REDIS_PARAMETERS_KEY}`"
            )

        return self.decrypt_parameters(encrypted_parameters)

    def decrypt_parameters(self, encrypted_parameters: bytes) -> dict:
        try:
            return json.loads(self.cipher_suite.decrypt(encrypted_parameters).decode())
        except InvalidToken as e:
            raise ConfigurationError(
                "Unable to decrypt runtime parameters, check the encryption key"
            ) from e
