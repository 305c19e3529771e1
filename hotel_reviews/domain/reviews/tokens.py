"""Review link tokens - signed, time-limited claims for the guest review form"""

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import NamedTuple, Optional

from jose import JWTError
from jose import jwt as jose_jwt
from jose.utils import base64url_decode, base64url_encode

from ...cache import TokenCache, build_token_cache
from ...config import JWT_ALGORITHM, REVIEW_TOKEN_TTL_DAYS, SECRET_KEY
from ...errors import InvalidToken

logger = logging.getLogger(__name__)

REVIEW_TOKEN_PURPOSE = "review"


def is_canonical_token(token: str) -> bool:
    """
    True if the token is three base64url segments that re-encode to
    themselves. The decoder ignores the spare low bits of a final character,
    so without this check an edited character can still verify.
    """
    segments = token.split(".")
    if len(segments) != 3:
        return False
    try:
        return all(
            base64url_encode(base64url_decode(segment.encode("ascii"))).decode("ascii") == segment
            for segment in segments
        )
    except (UnicodeError, ValueError):
        return False


class ReviewTokenClaims(NamedTuple):
    hotel_id: str
    email: str


class ReviewTokenCodec:
    """Issues and verifies review tokens, optionally caching verifications"""

    def __init__(
        self,
        secret_key: str,
        cache: Optional[TokenCache] = None,
        ttl: timedelta = timedelta(days=REVIEW_TOKEN_TTL_DAYS),
        algorithm: str = JWT_ALGORITHM,
    ):
        self.secret_key = secret_key
        self.cache = cache if cache is not None else TokenCache()
        self.ttl = ttl
        self.algorithm = algorithm

    def issue(self, hotel_id: str, email: str) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "hotelId": str(hotel_id),
            "email": email,
            "purpose": REVIEW_TOKEN_PURPOSE,
            "iat": now,
            "exp": now + self.ttl,
        }
        return jose_jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> ReviewTokenClaims:
        if not token or not isinstance(token, str):
            raise InvalidToken()
        if not is_canonical_token(token):
            logger.warning("⚠️ Review token rejected: non-canonical encoding")
            raise InvalidToken()

        cached = self.cache.get(token)
        if cached:
            return ReviewTokenClaims(cached["hotelId"], cached["email"])

        try:
            payload = jose_jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except (JWTError, ValueError) as e:
            logger.warning(f"⚠️ Review token rejected: {e}")
            raise InvalidToken() from e

        hotel_id = payload.get("hotelId")
        email = payload.get("email")
        expires_at = payload.get("exp")
        if (
            payload.get("purpose") != REVIEW_TOKEN_PURPOSE
            or not isinstance(hotel_id, str)
            or not isinstance(email, str)
            or not isinstance(expires_at, (int, float))
        ):
            logger.warning("⚠️ Review token rejected: unexpected claims")
            raise InvalidToken()

        self.cache.put(token, {"hotelId": hotel_id, "email": email}, float(expires_at))
        return ReviewTokenClaims(hotel_id, email)


@lru_cache
def get_token_codec() -> ReviewTokenCodec:
    """Process-wide codec built from configuration"""
    return ReviewTokenCodec(SECRET_KEY, cache=build_token_cache())
