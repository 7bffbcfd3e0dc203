import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel

from errors import ConfigError


# ------------------------------------------------------------
# Configuration
# ------------------------------------------------------------

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_PORT = 5000

REQUIRED_VARS = ("JWT_SECRET", "S3_BUCKET")


def env_int(name, value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}")


class Settings(BaseModel):
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db_name: str = "SmartInventory"

    # JWT config
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    token_expiration_minutes: int | None = None  # None means tokens never expire

    # S3 config, credentials fall back to the boto3 default chain when unset
    aws_access_key: str | None = None
    aws_secret_key: str | None = None
    aws_region: str = "us-east-1"
    s3_bucket: str
    s3_endpoint_url: str | None = None

    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env=None):
        """Build settings from the environment, reading a .env file first."""
        if env is None:
            load_dotenv()
            env = os.environ

        missing = [name for name in REQUIRED_VARS if not env.get(name)]
        if missing:
            raise ConfigError(f"Missing environment variables: {', '.join(missing)}")

        expiration = env.get("TOKEN_EXPIRATION_MINUTES")

        return cls(
            mongo_uri=env.get("MONGO_URI", "mongodb://localhost:27017"),
            mongo_db_name=env.get("MONGO_DB_NAME", "SmartInventory"),
            jwt_secret=env["JWT_SECRET"],
            jwt_algorithm=env.get("JWT_ALGORITHM", "HS256"),
            token_expiration_minutes=env_int("TOKEN_EXPIRATION_MINUTES", expiration) if expiration else None,
            aws_access_key=env.get("AWS_ACCESS_KEY") or None,
            aws_secret_key=env.get("AWS_SECRET_KEY") or None,
            aws_region=env.get("AWS_REGION", "us-east-1"),
            s3_bucket=env["S3_BUCKET"],
            s3_endpoint_url=env.get("S3_ENDPOINT_URL") or None,
            port=env_int("PORT", env.get("PORT", DEFAULT_PORT)),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level="INFO"):
    logging.basicConfig(level=level, format=LOG_FORMAT)
