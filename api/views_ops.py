"""Operational endpoints that move mints forward (mint, provider webhook)."""

import json
import logging

import requests
from django.conf import settings
from django.http import JsonResponse, HttpResponseBadRequest, HttpResponseForbidden

from core.adapters.identity_adapter import bearer_token, verify_identity_token
from core.adapters.signature_adapter import recover_address, verify_signature
from core.adapters.webhook_verifier import confirm_sns_subscription, hmac_valid, verify_sns_message
from core.errors import InvalidSignature, MintGateError
from core.phases import load_mint_config
from core.reconciliation import handle_provider_notification
from core.services import admit_mint

logger = logging.getLogger(__name__)


def health(request):
	return JsonResponse({"ok": True})


def error_response(e: MintGateError) -> JsonResponse:
	return JsonResponse({"error": e.message, "code": e.code}, status=e.status_code)


def _admit(wallet_address: str) -> JsonResponse:
	try:
		reservation = admit_mint(wallet_address)
	except MintGateError as e:
		logger.info("Mint denied for %s: %s", wallet_address, e.message)
		return error_response(e)
	except Exception as e:
		logger.exception("Error during minting process for %s", wallet_address)
		return JsonResponse({"error": f"Failed to process mint request: {e}"}, status=500)
	return JsonResponse(reservation.as_response())


def mint_passport(request):
	"""
	POST: Mint for the wallet in a Passport ID token (Authorization: Bearer <token>)
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")

	try:
		wallet_address = verify_identity_token(bearer_token(request.headers.get("Authorization")))
	except MintGateError as e:
		return error_response(e)
	logger.debug("ID token verified for %s", wallet_address)
	return _admit(wallet_address)


def mint_eoa(request):
	"""
	POST: Mint for the wallet that signed the configured EOA message.

	Body: {"signature": "0x..."}
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	try:
		body = json.loads(request.body or b"{}")
	except ValueError:
		return HttpResponseBadRequest("Invalid JSON")

	signature = body.get("signature")
	message = load_mint_config().eoa_mint_message
	try:
		wallet_address = recover_address(message, signature)
		verify_signature(wallet_address, message, signature)
	except MintGateError as e:
		logger.warning("Failed to verify signature: %s", e.message)
		return error_response(e)
	logger.info("Recovered wallet address %s from signature", wallet_address)
	return _admit(wallet_address)


def mint_webhook(request):
	"""
	POST: Minting provider notifications.

	With MINT_WEBHOOK_MODE="sns" the body is an SNS envelope whose Message holds the
	notification; with "hmac" the body is the notification itself:
	{"event_name": "mint_request_updated", "data": {"reference_id", "token_id", "status", "owner_address"}}
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST required")

	raw = request.body or b""
	try:
		payload = json.loads(raw.decode("utf-8"))
	except ValueError:
		return HttpResponseBadRequest("Invalid JSON")

	config = load_mint_config()

	if settings.MINT_WEBHOOK_MODE == "hmac":
		if not hmac_valid(raw, request.headers.get("X-Signature") or "", settings.MINT_WEBHOOK_SECRET):
			return HttpResponseForbidden("Bad signature")
		message = payload
	else:
		try:
			verify_sns_message(payload, config.allowed_topic_arn)
			if payload.get("Type") == "SubscriptionConfirmation":
				confirm_sns_subscription(payload)
				return JsonResponse({"ok": True, "subscribed": True})
		except InvalidSignature as e:
			logger.warning("Rejected webhook: %s", e.message)
			return HttpResponseForbidden("Bad signature")
		except requests.RequestException as e:
			logger.error("Failed to confirm SNS subscription for %s: %s", payload.get("TopicArn"), e)
			return JsonResponse({"error": "Failed to confirm subscription"}, status=502)
		if payload.get("Type") != "Notification":
			return JsonResponse({"ok": True, "ignored": True})
		try:
			message = json.loads(payload.get("Message") or "{}")
		except ValueError:
			return HttpResponseBadRequest("Invalid notification message")

	try:
		mint = handle_provider_notification(message, config=config)
	except KeyError as e:
		return HttpResponseBadRequest(f"Missing field: {e}")
	except ValueError as e:
		return HttpResponseBadRequest(str(e))

	if mint is None:
		return JsonResponse({"ok": True, "ignored": True})
	return JsonResponse({"ok": True, "uuid": mint.uuid, "status": mint.status})
