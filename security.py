import datetime
import logging

import jwt
from werkzeug.security import generate_password_hash, check_password_hash

from errors import AuthError

logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Password hashing
# ------------------------------------------------------------

# werkzeug salts every hash with a fresh random salt
def hash_password(password):
    return generate_password_hash(password)


def verify_password(password_hash, password):
    return check_password_hash(password_hash, password)


# ------------------------------------------------------------
# JWT tokens
# ------------------------------------------------------------

class TokenService:
    """Signs and verifies bearer tokens carrying the user id as ``sub``.

    Tokens only get an ``exp`` claim when ``expiration_minutes`` is set, so by
    default a token stays valid until the signing secret changes.
    """

    def __init__(self, secret, algorithm="HS256", expiration_minutes=None):
        self.secret = secret
        self.algorithm = algorithm
        self.expiration_minutes = expiration_minutes

    @classmethod
    def from_settings(cls, settings):
        return cls(settings.jwt_secret, settings.jwt_algorithm, settings.token_expiration_minutes)

    def issue(self, user_id):
        now = datetime.datetime.now(datetime.timezone.utc)
        token_data = {"sub": str(user_id), "iat": now}
        if self.expiration_minutes is not None:
            token_data["exp"] = now + datetime.timedelta(minutes=self.expiration_minutes)

        return jwt.encode(token_data, self.secret, algorithm=self.algorithm)

    def verify(self, token):
        """Returns the user id embedded in ``token`` or raises AuthError."""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected token: {e}")
            raise AuthError("Invalid token")

        user_id = payload.get("sub")
        if not user_id:
            raise AuthError("Invalid token")
        return user_id
