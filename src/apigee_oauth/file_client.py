import json

from .utils import *
from .base_client import RuntimeClient
from .oauth_exception import ConfigurationError


class FileClient(RuntimeClient):
    def __init__(self, parameters_file: str):
        self.parameters_file = parameters_file

        self.parameters = self.load_parameters(self.parameters_file)

        super().__init__(
            self.parameters.get(KEY_URI),
            self.parameters.get(KEY_API_KEY),
            timeout=self.parameters.get(KEY_TIMEOUT),
        )

    def load_parameters(self, filepath: str) -> dict:
        with open(filepath, "r") as fin:
            try:
                return json.load(fin)
            except ValueError as e:
                raise ConfigurationError(
                    f"Unable to read parameters file {filepath}: {e}"
                ) from e

