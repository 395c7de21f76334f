"""Authenticity checks for minting-provider webhooks.

Two modes (settings.MINT_WEBHOOK_MODE):
- "hmac": hex HMAC-SHA256 of the raw body in the X-Signature header
- "sns": AWS SNS envelope; topic ARN must match the environment's glob and the
  signature must verify against the SNS signing certificate
"""

import base64
import fnmatch
import hashlib
import hmac
import logging
import re
from urllib.parse import urlparse

import requests
from cachetools import TTLCache, cached
from cryptography import x509
from cryptography.exceptions import InvalidSignature as BadCryptoSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from django.conf import settings

from ..errors import InvalidSignature

logger = logging.getLogger(__name__)

SNS_CERT_HOST = re.compile(r"^sns\.[a-z0-9\-]+\.amazonaws\.com(\.cn)?$")

# Keys covered by the SNS signature, in canonical order
SNS_NOTIFICATION_KEYS = ("Message", "MessageId", "Subject", "Timestamp", "TopicArn", "Type")
SNS_SUBSCRIPTION_KEYS = ("Message", "MessageId", "SubscribeURL", "Timestamp", "Token", "TopicArn", "Type")


def hmac_valid(raw_body: bytes, provided_sig: str, secret: str) -> bool:
	mac = hmac.new(key=secret.encode("utf-8"), msg=raw_body, digestmod=hashlib.sha256)
	expected = mac.hexdigest()
	return hmac.compare_digest(expected, provided_sig or "")


def sns_canonical_string(envelope: dict) -> str:
	keys = SNS_NOTIFICATION_KEYS if envelope.get("Type") == "Notification" else SNS_SUBSCRIPTION_KEYS
	parts = []
	for key in keys:
		if key in envelope and envelope[key] is not None:
			parts.append(f"{key}\n{envelope[key]}\n")
	return "".join(parts)


@cached(TTLCache(maxsize=16, ttl=3600))
def _fetch_signing_cert(url: str) -> bytes:
	r = requests.get(url, timeout=settings.PROVIDER_HTTP_TIMEOUT)
	r.raise_for_status()
	return r.content


def verify_sns_message(envelope: dict, allowed_topic_arn: str) -> None:
	"""
	Raise InvalidSignature unless the envelope is a genuine SNS message for an allowed topic.
	"""
	topic = envelope.get("TopicArn") or ""
	if not fnmatch.fnmatchcase(topic, allowed_topic_arn or ""):
		raise InvalidSignature(f"Topic {topic!r} is not allowed")

	cert_url = envelope.get("SigningCertURL") or envelope.get("SigningCertUrl") or ""
	parsed = urlparse(cert_url)
	if parsed.scheme != "https" or not SNS_CERT_HOST.match(parsed.hostname or ""):
		raise InvalidSignature("Untrusted SNS signing certificate URL")

	version = str(envelope.get("SignatureVersion", "1"))
	if version == "1":
		algorithm = hashes.SHA1()
	elif version == "2":
		algorithm = hashes.SHA256()
	else:
		raise InvalidSignature(f"Unsupported SNS signature version {version}")

	try:
		cert = x509.load_pem_x509_certificate(_fetch_signing_cert(cert_url))
		cert.public_key().verify(
			base64.b64decode(envelope.get("Signature") or ""),
			sns_canonical_string(envelope).encode("utf-8"),
			padding.PKCS1v15(),
			algorithm,
		)
	except (requests.RequestException, ValueError, BadCryptoSignature) as e:
		logger.warning("SNS signature verification failed: %s", e)
		raise InvalidSignature("Bad SNS signature") from e


def confirm_sns_subscription(envelope: dict) -> None:
	"""
	Visit SubscribeURL so SNS starts delivering to this endpoint.
	"""
	url = envelope.get("SubscribeURL") or ""
	parsed = urlparse(url)
	if parsed.scheme != "https" or not SNS_CERT_HOST.match(parsed.hostname or ""):
		raise InvalidSignature("Untrusted SNS SubscribeURL")
	r = requests.get(url, timeout=settings.PROVIDER_HTTP_TIMEOUT)
	r.raise_for_status()
	logger.info("Confirmed SNS subscription for %s", envelope.get("TopicArn"))
