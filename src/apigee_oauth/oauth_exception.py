from apigee_oauth.schemas.oauth import OAuthError


class ConfigurationError(Exception):
    pass


class OAuthException(Exception):
    def __init__(self, title, error: OAuthError, parameters: dict):
        super().__init__(f"{title}: {error.message}")
        self.title = title
        self.error = error
        self.parameters = parameters
