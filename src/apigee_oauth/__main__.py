import json
import click
import redis
from cryptography.fernet import Fernet

from apigee_oauth import (
    FileClient,
    RedisClient,
    OAuthException,
    ClientCredentialsRequest,
    InvalidateTokenRequest,
    VerifyTokenRequest,
)
from apigee_oauth.utils import (
    KEY_REDIS_HOST,
    KEY_REDIS_PORT,
    KEY_REDIS_PASSWORD,
    KEY_REDIS_ENCRYPTION_KEY,
    REDIS_PARAMETERS_KEY,
)


MODES = [
    "new-parameters",
    "generate-encryption-key",
    "prime-redis-cache",
    "client-credentials",
    "verify",
    "invalidate",
]
TOKEN_MODES = ["client-credentials", "verify", "invalidate"]


class ModeOptions(click.Choice):
    def __init__(self):
        super().__init__(choices=MODES)


class ClientTypeOptions(click.Choice):
    def __init__(self):
        super().__init__(choices=["file", "redis"])


def validate_client(ctx, param, value):
    mode = ctx.params.get("mode")
    if mode in TOKEN_MODES and not value:
        raise click.BadParameter(f"Client type must be specified when using {mode} mode.")
    if mode == "prime-redis-cache":
        return "redis"  # Automatically use Redis for prime-redis-cache
    return value


def require(value, name, mode):
    if not value:
        raise click.BadParameter(f"{name} must be specified when using {mode} mode.")
    return value


@click.command()
@click.argument("mode", type=ModeOptions())
@click.option("-p", "--parameters", type=click.Path(), required=True)
@click.option(
    "-c",
    "--client",
    type=ClientTypeOptions(),
    callback=validate_client,
    help="Choose the client type: file or redis (required for token modes)",
)
@click.option(
    "-r",
    "--runtime-parameters",
    type=click.Path(exists=True),
    help="Runtime parameters (uri, key) to store in Redis",
)
@click.option("--client-id", help="Client id (app key) of the calling app")
@click.option("--client-secret", help="Client secret of the calling app")
@click.option("-s", "--scope", help="Space delimited scopes to request or require")
@click.option("-t", "--token", help="The token to verify or invalidate")
def main(mode, parameters, client, runtime_parameters, client_id, client_secret, scope, token):
    """A command line tool for managing Apigee OAuth runtime interactions."""

    click.echo(f"Parameters file path: {parameters}")

    if mode == "new-parameters":
        click.echo("Generating new parameters JSON.")

        empty_parameters = {
            "uri": "Runtime proxy URI here",
            "key": "API key here",
            "timeout": None,
        }

        with open(parameters, "w") as fin:
            json.dump(empty_parameters, fin, indent=4)

        click.echo(f"New parameters json file created at {parameters}")

    elif mode == "generate-encryption-key":
        click.echo("Generating encryption key.")

        key = Fernet.generate_key()

        click.echo(f"Encryption key: {key.decode()}")

    elif mode == "prime-redis-cache":
        require(runtime_parameters, "Runtime parameters file path", mode)
        click.echo("Priming the Redis cache.")

        with open(parameters, "r") as fin:
            redis_parameters = json.load(fin)

        r = redis.Redis(
            host=redis_parameters[KEY_REDIS_HOST],
            port=redis_parameters[KEY_REDIS_PORT],
            password=redis_parameters[KEY_REDIS_PASSWORD],
        )

        encryption_key = redis_parameters[KEY_REDIS_ENCRYPTION_KEY].encode()

        with open(runtime_parameters, "r") as fin:
            runtime = json.load(fin)

        cipher_suite = Fernet(encryption_key)
        encrypted_parameters = cipher_suite.encrypt(json.dumps(runtime).encode())

        r.set(REDIS_PARAMETERS_KEY, encrypted_parameters)

        click.echo("Redis cache primed with runtime parameters.")

    else:
        api_client = (
            FileClient(parameters) if client == "file" else RedisClient(parameters)
        )

        click.echo(f"Using {client} client.")

        if mode == "client-credentials":
            request = ClientCredentialsRequest(
                client_id=require(client_id, "Client id", mode),
                client_secret=require(client_secret, "Client secret", mode),
                scope=scope,
            )
            result, error = api_client.create_token_client_credentials(request)
            title = "Unable to create token"
        elif mode == "verify":
            request = VerifyTokenRequest(
                token=require(token, "Token", mode), required_scopes=scope
            )
            result, error = api_client.verify_token(request)
            title = "Unable to verify token"
        else:
            request = InvalidateTokenRequest(
                client_id=require(client_id, "Client id", mode),
                client_secret=require(client_secret, "Client secret", mode),
                token=require(token, "Token", mode),
            )
            result, error = api_client.invalidate_token(request)
            title = "Unable to invalidate token"

        if error is not None:
            raise OAuthException(title, error, {"mode": mode, "client": client})

        if hasattr(result, "model_dump_json"):
            click.echo(result.model_dump_json(indent=4))
        else:
            click.echo(json.dumps(result, indent=4))


if __name__ == "__main__":
    main()
