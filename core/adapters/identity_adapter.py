"""Passport identity token verification.

Tokens are RS256 JWTs signed by keys published at settings.IDENTITY_JWKS_URL. The JWKS
document is cached for IDENTITY_JWKS_CACHE_SECONDS and refetched after that.
"""

import logging

import requests
from cachetools import TTLCache, cached
from django.conf import settings
from jose import JWTError, jwt

from ..errors import InvalidToken

logger = logging.getLogger(__name__)

_jwks_cache = TTLCache(maxsize=4, ttl=settings.IDENTITY_JWKS_CACHE_SECONDS)


@cached(_jwks_cache)
def fetch_jwks(url: str) -> dict:
	r = requests.get(url, timeout=settings.PROVIDER_HTTP_TIMEOUT)
	r.raise_for_status()
	logger.debug("Fetched JWKS from %s", url)
	return r.json()


def verify_identity_token(id_token: str) -> str:
	"""
	Verify the token signature and expiry and return the lower-cased wallet address
	from passport.zkevm_eth_address.
	"""
	if not id_token:
		raise InvalidToken("Missing authorization header")
	try:
		jwks = fetch_jwks(settings.IDENTITY_JWKS_URL)
		claims = jwt.decode(id_token, jwks, algorithms=["RS256"], options={"verify_aud": False})
	except (JWTError, requests.RequestException) as e:
		logger.warning("Failed to verify ID token: %s", e)
		raise InvalidToken() from e

	address = (claims.get("passport") or {}).get("zkevm_eth_address")
	if not address:
		raise InvalidToken("ID token carries no wallet address")
	return address.lower()


def bearer_token(authorization_header: str | None) -> str:
	"""
	Strip the 'Bearer ' prefix from an Authorization header value.
	"""
	if not authorization_header:
		return ""
	value = authorization_header.strip()
	if value.lower().startswith("bearer "):
		return value[7:].strip()
	return value
