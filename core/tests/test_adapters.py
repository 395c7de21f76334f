"""Tests for the external-collaborator adapters (identity, signatures, provider, metadata, webhooks)."""

import hashlib
import hmac
import json
import tempfile
import time
from pathlib import Path
from unittest import mock

import requests
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from django.test import SimpleTestCase, override_settings
from eth_account import Account
from eth_account.messages import encode_defunct
from jose import jwk, jwt

from core.adapters import identity_adapter
from core.adapters.metadata_adapter import get_metadata, metadata_for_token
from core.adapters.minting_adapter import ImmutableMintingAdapter
from core.adapters.signature_adapter import recover_address, verify_signature
from core.adapters.webhook_verifier import hmac_valid, sns_canonical_string, verify_sns_message
from core.errors import InvalidSignature, InvalidToken, ProviderUnavailable

MESSAGE = "Sign this message to verify your wallet address"


class SignatureAdapterTests(SimpleTestCase):
	def setUp(self):
		self.account = Account.from_key("0x" + "11" * 32)
		self.signature = self.account.sign_message(encode_defunct(text=MESSAGE)).signature

	def test_recovers_signer(self):
		self.assertEqual(recover_address(MESSAGE, self.signature), self.account.address)

	def test_verify_is_case_insensitive(self):
		verify_signature(self.account.address.lower(), MESSAGE, self.signature)

	def test_signature_over_other_message_does_not_verify(self):
		with self.assertRaises(InvalidSignature):
			verify_signature(self.account.address, "something else", self.signature)

	def test_garbage_signature_is_rejected(self):
		with self.assertRaises(InvalidSignature):
			recover_address(MESSAGE, "0x1234")
		with self.assertRaises(InvalidSignature):
			recover_address(MESSAGE, None)


class IdentityAdapterTests(SimpleTestCase):
	@classmethod
	def setUpClass(cls):
		super().setUpClass()
		key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
		cls.private_pem = key.private_bytes(
			serialization.Encoding.PEM, serialization.PrivateFormat.PKCS8, serialization.NoEncryption(),
		).decode()
		public_pem = key.public_key().public_bytes(
			serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo,
		).decode()
		cls.jwks = {"keys": [jwk.construct(public_pem, "RS256").to_dict()]}

	def token(self, **claims):
		payload = {
			"passport": {"zkevm_eth_address": "0xABCDEF0000000000000000000000000000000001"},
			"exp": int(time.time()) + 600,
		}
		payload.update(claims)
		return jwt.encode(payload, self.private_pem, algorithm="RS256")

	def verify(self, token):
		with mock.patch.object(identity_adapter, "fetch_jwks", return_value=self.jwks):
			return identity_adapter.verify_identity_token(token)

	def test_valid_token_yields_lowercase_wallet(self):
		self.assertEqual(self.verify(self.token()), "0xabcdef0000000000000000000000000000000001")

	def test_expired_token_is_rejected(self):
		with self.assertRaises(InvalidToken):
			self.verify(self.token(exp=int(time.time()) - 60))

	def test_token_without_passport_is_rejected(self):
		with self.assertRaises(InvalidToken):
			self.verify(self.token(passport={}))

	def test_missing_token_is_rejected(self):
		with self.assertRaises(InvalidToken):
			self.verify("")

	def test_bearer_prefix_is_stripped(self):
		self.assertEqual(identity_adapter.bearer_token("Bearer abc.def"), "abc.def")
		self.assertEqual(identity_adapter.bearer_token(None), "")


class ImmutableMintingAdapterTests(SimpleTestCase):
	def setUp(self):
		self.adapter = ImmutableMintingAdapter("https://api.example.test/", "key", "test-chain", timeout=5)

	def response(self, status=200, payload=None):
		r = requests.Response()
		r.status_code = status
		r._content = json.dumps(payload or {}).encode()
		return r

	@mock.patch("core.adapters.minting_adapter.requests.post")
	def test_create_sends_single_asset(self, post):
		post.return_value = self.response(202, {})
		self.adapter.create_mint_request("0xcol", "0xowner", "ref-1", token_id=6, metadata={"name": "x"})

		url = post.call_args.args[0]
		body = post.call_args.kwargs["json"]
		self.assertEqual(url, "https://api.example.test/v1/chains/test-chain/collections/0xcol/nfts/mint-requests")
		self.assertEqual(post.call_args.kwargs["headers"]["x-immutable-api-key"], "key")
		self.assertEqual(body["assets"], [{"owner_address": "0xowner", "reference_id": "ref-1", "token_id": "6", "metadata": {"name": "x"}}])

	@mock.patch("core.adapters.minting_adapter.requests.post")
	def test_create_http_error_is_provider_unavailable(self, post):
		post.return_value = self.response(500)
		with self.assertRaises(ProviderUnavailable):
			self.adapter.create_mint_request("0xcol", "0xowner", "ref-1", token_id=6)

	@mock.patch("core.adapters.minting_adapter.requests.post")
	def test_create_accepted_with_non_json_body_is_provider_unavailable(self, post):
		r = requests.Response()
		r.status_code = 202
		r._content = b"<html>accepted</html>"
		post.return_value = r
		with self.assertRaises(ProviderUnavailable):
			self.adapter.create_mint_request("0xcol", "0xowner", "ref-1", token_id=6)

	@mock.patch("core.adapters.minting_adapter.requests.get")
	def test_get_returns_first_result(self, get):
		get.return_value = self.response(200, {"result": [{"status": "succeeded", "token_id": "6", "owner_address": "0xowner"}]})
		result = self.adapter.get_mint_request("0xcol", "ref-1")
		self.assertEqual((result["status"], result["token_id"], result["owner_address"]), ("succeeded", "6", "0xowner"))

	@mock.patch("core.adapters.minting_adapter.requests.get")
	def test_get_unknown_reference_is_none(self, get):
		get.return_value = self.response(200, {"result": []})
		self.assertIsNone(self.adapter.get_mint_request("0xcol", "ref-1"))

	@mock.patch("core.adapters.minting_adapter.requests.get")
	def test_get_http_error_is_provider_unavailable(self, get):
		get.return_value = self.response(503)
		with self.assertRaises(ProviderUnavailable):
			self.adapter.get_mint_request("0xcol", "ref-1")


class MetadataAdapterTests(SimpleTestCase):
	def test_reads_token_file(self):
		with tempfile.TemporaryDirectory() as d:
			Path(d, "6").write_text(json.dumps({"name": "Token #6"}), encoding="utf-8")
			self.assertEqual(get_metadata(d, 6), {"name": "Token #6"})
			self.assertIsNone(get_metadata(d, 7))

	def test_unparseable_file_is_none(self):
		with tempfile.TemporaryDirectory() as d:
			Path(d, "6").write_text("{not json", encoding="utf-8")
			self.assertIsNone(get_metadata(d, 6))

	@override_settings(DEFAULT_TOKEN_METADATA={"name": "Default"})
	def test_default_metadata_when_file_missing(self):
		with tempfile.TemporaryDirectory() as d:
			self.assertEqual(metadata_for_token(d, 6), {"name": "Default"})


class WebhookVerifierTests(SimpleTestCase):
	def test_hmac(self):
		body = b'{"event_name": "mint_request_updated"}'
		sig = hmac.new(b"secret", body, hashlib.sha256).hexdigest()
		self.assertTrue(hmac_valid(body, sig, "secret"))
		self.assertFalse(hmac_valid(body, sig, "other"))
		self.assertFalse(hmac_valid(body, "", "secret"))

	def test_sns_canonical_string_for_notification(self):
		envelope = {
			"Type": "Notification", "MessageId": "m1", "TopicArn": "arn:t", "Message": "{}",
			"Timestamp": "2024-01-01T00:00:00Z", "SignatureVersion": "1",
		}
		self.assertEqual(
			sns_canonical_string(envelope),
			"Message\n{}\nMessageId\nm1\nTimestamp\n2024-01-01T00:00:00Z\nTopicArn\narn:t\nType\nNotification\n",
		)

	def test_sns_topic_outside_allowed_glob_is_rejected(self):
		with self.assertRaises(InvalidSignature):
			verify_sns_message({"TopicArn": "arn:aws:sns:us-east-2:999:other"}, "arn:aws:sns:us-east-2:123:*")

	def test_sns_untrusted_certificate_host_is_rejected(self):
		envelope = {
			"TopicArn": "arn:aws:sns:us-east-2:123:mints",
			"SigningCertURL": "https://evil.example.com/cert.pem",
		}
		with self.assertRaises(InvalidSignature):
			verify_sns_message(envelope, "arn:aws:sns:us-east-2:123:*")
