"""Read-only endpoints: mint configuration, wallet eligibility and provider status."""

import logging

from django.http import JsonResponse

from core.adapters.minting_adapter import get_minting_adapter
from core.errors import ProviderUnavailable
from core.phases import load_mint_config
from core.services import supply_summary, wallet_eligibility

logger = logging.getLogger(__name__)


def mint_config(request):
	"""
	GET: Phases with capacities and minted counts
	"""
	return JsonResponse(supply_summary())


def eligibility(request, address: str):
	"""
	GET: Per-phase eligibility of a wallet address
	"""
	try:
		data = wallet_eligibility(address)
	except ValueError:
		return JsonResponse({"error": "Invalid address check"}, status=400)
	return JsonResponse(data)


def get_mint_request(request, reference_id: str):
	"""
	GET: Proxy the provider's view of a mint request
	"""
	config = load_mint_config()
	try:
		result = get_minting_adapter(config).get_mint_request(config.collection_address, reference_id)
	except ProviderUnavailable as e:
		logger.error("Error querying mint request %s: %s", reference_id, e)
		return JsonResponse({"error": "Failed to query mint request"}, status=e.status_code)
	if result is None:
		return JsonResponse({"error": "Mint request not found"}, status=404)
	return JsonResponse({"result": [result["raw"]]})


def eoa_mint_message(request):
	"""
	GET: The message an EOA signs to mint
	"""
	return JsonResponse({"message": load_mint_config().eoa_mint_message})
