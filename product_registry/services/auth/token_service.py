# services/auth/token_service.py
import jwt
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from product_registry.core.exceptions import AuthError
from product_registry.models.product import Caller

logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'


class TokenService:
    """Turns bearer tokens issued by the identity provider into callers"""

    def __init__(self, secret_key: str, token_expiry: timedelta = timedelta(hours=24)):
        self.secret_key = secret_key
        self.token_expiry = token_expiry

    def generate_token(self, identity: str, role: str, expires_in: Optional[timedelta] = None) -> str:
        """Issue a token carrying sub and role (development and tests)"""
        now = datetime.now(timezone.utc)
        payload = {
            'sub': identity,
            'role': role,
            'iat': now,
            'exp': now + (expires_in or self.token_expiry)
        }
        return jwt.encode(payload, self.secret_key, algorithm=ALGORITHM)

    def verify_token(self, token: str) -> Caller:
        """
        Decode a token into a Caller

        Raises:
            AuthError: expired, malformed, or missing sub/role
        """
        if not token:
            raise AuthError("Token is required")

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected token: {e}")
            raise AuthError("Invalid token")

        identity = payload.get('sub')
        role = payload.get('role')
        if not identity or not role:
            raise AuthError("Invalid token payload")

        return Caller(identity=str(identity), role=str(role))
