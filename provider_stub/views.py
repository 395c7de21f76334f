"""HTTP endpoints for the provider stub mirroring the minting provider's surface.

The adapter uses ORM access for determinism; these endpoints let a developer create,
inspect and settle requests by hand. Settling does not call back: run
`manage.py reconcile_mints` to pick the outcome up.
"""

import json
import logging

from django.http import JsonResponse, HttpResponseBadRequest, HttpResponseNotFound

from core.adapters.minting_adapter import StubMintingAdapter
from .models import StubMintRequest

logger = logging.getLogger(__name__)


def mint_requests(request, collection: str):
	"""
	POST: Accept {"assets": [{reference_id, owner_address, token_id, metadata}]}
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	body = json.loads(request.body or b"{}")
	assets = body.get("assets") or []
	if not assets:
		return HttpResponseBadRequest("assets required")
	for asset in assets:
		if not asset.get("reference_id") or not asset.get("owner_address"):
			return HttpResponseBadRequest("reference_id and owner_address required")
		token_id = asset.get("token_id")
		StubMintingAdapter.create_mint_request(
			collection.lower(),
			asset["owner_address"].lower(),
			asset["reference_id"],
			token_id=int(token_id) if token_id not in (None, "") else None,
			metadata=asset.get("metadata"),
		)
	return JsonResponse({"accepted": len(assets)}, status=202)


def mint_request(request, collection: str, reference_id: str):
	"""
	GET: Provider-shaped {"result": [...]} for one reference id (empty when unknown)
	"""
	req = StubMintRequest.objects.filter(collection_address=collection.lower(), reference_id=reference_id).first()
	return JsonResponse({"result": [req.as_dict()] if req else []})


def settle(request, collection: str, reference_id: str):
	"""
	POST: Move a request to {"status": "succeeded" | "failed"}
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	body = json.loads(request.body or b"{}")
	status = body.get("status")
	if status not in ("succeeded", "failed"):
		return HttpResponseBadRequest("status must be succeeded or failed")
	req = StubMintRequest.objects.filter(collection_address=collection.lower(), reference_id=reference_id).first()
	if req is None:
		return HttpResponseNotFound("Unknown reference id")
	req.status = status
	req.save(update_fields=["status", "updated_at"])
	logger.info("Stub provider settled %s as %s", reference_id, status)
	return JsonResponse(req.as_dict())
