"""Adapters over the external minting provider.

ImmutableMintingAdapter talks to the Immutable minting API over HTTP. StubMintingAdapter
mutates the provider_stub tables directly, the same way a real provider would record
requests, so the whole flow runs without network calls.

Both expose:
- create_mint_request(collection, owner, reference_id, token_id=None, metadata=None)
- get_mint_request(collection, reference_id) -> {"status", "token_id", "owner_address"} | None
"""

import logging

import requests
from django.conf import settings
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from provider_stub.models import StubMintRequest
from ..errors import ProviderUnavailable

logger = logging.getLogger(__name__)


class ImmutableMintingAdapter:
	"""
	Minimal client for /v1/chains/{chain}/collections/{collection}/nfts/mint-requests.

	Reads are retried on connection errors and timeouts; creates are sent once.
	"""

	def __init__(self, api_url: str, api_key: str, chain_name: str, timeout: int | None = None):
		self.api_url = api_url.rstrip("/")
		self.api_key = api_key
		self.chain_name = chain_name
		self.timeout = timeout or settings.PROVIDER_HTTP_TIMEOUT

	def _mint_requests_url(self, collection: str) -> str:
		return f"{self.api_url}/v1/chains/{self.chain_name}/collections/{collection}/nfts/mint-requests"

	def _headers(self) -> dict:
		return {"x-immutable-api-key": self.api_key, "Content-Type": "application/json"}

	def create_mint_request(self, collection: str, owner: str, reference_id: str, token_id: int | None = None, metadata: dict | None = None):
		asset = {
			"owner_address": owner,
			"reference_id": reference_id,
			# None lets the provider pick the id (batch minting)
			"token_id": str(token_id) if token_id is not None else None,
		}
		if metadata is not None:
			asset["metadata"] = metadata

		try:
			r = requests.post(
				self._mint_requests_url(collection),
				headers=self._headers(),
				json={"assets": [asset]},
				timeout=self.timeout,
			)
			r.raise_for_status()
			accepted = r.json() if r.content else {}
		except (requests.RequestException, ValueError) as e:
			raise ProviderUnavailable(f"Mint request {reference_id} was not accepted: {e}") from e

		logger.info("Mint request sent with UUID: %s", reference_id)
		return accepted

	@retry(
		retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
		stop=stop_after_attempt(3),
		wait=wait_exponential(multiplier=1, min=1, max=10),
		reraise=True,
	)
	def _fetch(self, url: str) -> dict:
		r = requests.get(url, headers=self._headers(), timeout=self.timeout)
		r.raise_for_status()
		return r.json()

	def get_mint_request(self, collection: str, reference_id: str) -> dict | None:
		try:
			payload = self._fetch(f"{self._mint_requests_url(collection)}/{reference_id}")
		except requests.RequestException as e:
			raise ProviderUnavailable(f"Failed to query mint request {reference_id}: {e}") from e

		results = payload.get("result") or []
		if not results:
			return None
		row = results[0]
		return {
			"status": row.get("status"),
			"token_id": row.get("token_id"),
			"owner_address": row.get("owner_address"),
			"raw": row,
		}


class StubMintingAdapter:
	"""
	Records mint requests in provider_stub.StubMintRequest. Requests start pending;
	their status is moved with the stub's settle endpoint or directly in tests.
	"""

	@staticmethod
	def create_mint_request(collection: str, owner: str, reference_id: str, token_id: int | None = None, metadata: dict | None = None):
		req, created = StubMintRequest.objects.get_or_create(
			reference_id=reference_id,
			defaults=dict(
				collection_address=collection,
				owner_address=owner,
				token_id=token_id,
				metadata=metadata,
			),
		)
		if not created:
			logger.debug("Stub provider already has mint request %s", reference_id)
		return {"reference_id": req.reference_id, "status": req.status}

	@staticmethod
	def get_mint_request(collection: str, reference_id: str) -> dict | None:
		req = StubMintRequest.objects.filter(collection_address=collection, reference_id=reference_id).first()
		if req is None:
			return None
		return {
			"status": req.status,
			"token_id": req.token_id,
			"owner_address": req.owner_address,
			"raw": req.as_dict(),
		}


def get_minting_adapter(config):
	"""
	Adapter selected by settings.MINTING_PROVIDER for the given mint config.
	"""
	provider = getattr(settings, "MINTING_PROVIDER", "stub")
	if provider == "immutable":
		return ImmutableMintingAdapter(config.api_url, config.api_key, config.chain_name)
	if provider == "stub":
		return StubMintingAdapter()
	raise ValueError(f"Unknown MINTING_PROVIDER '{provider}'")
