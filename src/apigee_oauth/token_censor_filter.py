import logging
import re


class TokenCensorFilter(logging.Filter):
    def __init__(self):
        super().__init__()
        access_token_pattern = r"access_token='([^']+)'"
        access_json_pattern = r"'access_token': '([^']+)'"

        refresh_token_pattern = r"refresh_token='([^']+)'"
        refresh_json_pattern = r"'refresh_token': '([^']+)'"

        client_secret_json_pattern = r"'client_secret': '([^']+)'"
        password_json_pattern = r"'password': '([^']+)'"
        token_json_pattern = r"'token': '([^']+)'"

        authorization_pattern = r"'Authorization': '(Basic|Bearer) ([^']+)'"
        api_key_pattern = r"'x-DNA-Api-Key': '([^']+)'"

        self.patterns = [
            (access_token_pattern, "access_token=[ACCESS_TOKEN]"),
            (access_json_pattern, "'access_token': [ACCESS_TOKEN]"),
            (refresh_token_pattern, "refresh_token=[REFRESH_TOKEN]"),
            (refresh_json_pattern, "'refresh_token': [REFRESH_TOKEN]"),
            (client_secret_json_pattern, "'client_secret': [CLIENT_SECRET]"),
            (password_json_pattern, "'password': [PASSWORD]"),
            (token_json_pattern, "'token': [TOKEN]"),
            (authorization_pattern, r"'Authorization': '\1 [CREDENTIALS]'"),
            (api_key_pattern, "'x-DNA-Api-Key': [API_KEY]"),
        ]

    def filter(self, record):
        message = record.getMessage()

        for pattern, replacement in self.patterns:
            message = re.sub(pattern, replacement, message, flags=re.DOTALL)

        record.msg = message
        record.args = ()
        return True
