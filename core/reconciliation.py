"""Reconciliation of pending mints against the minting provider.

Webhook notifications and poll passes both end in apply_mint_update, which owns the
only status transitions in the ledger: pending → succeeded and pending → failed.

On success the wallet is unlocked and (allowlisted phases) one unit of allowance is
consumed; on failure the wallet is unlocked and the allowance is left alone. Both happen
in one transaction with the status change. Re-applying a terminal update is a no-op.
"""

import logging

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .adapters.minting_adapter import get_minting_adapter
from .errors import ProviderUnavailable
from .models import AllowlistEntry, LockedAddress, MintedToken, MintStatus
from .phases import MintConfig, load_mint_config
from .services import submit_mint_request

logger = logging.getLogger(__name__)

MINT_REQUEST_UPDATED = "mint_request_updated"


def _phase_allowlisted(config: MintConfig, phase_index: int) -> bool:
	if 0 <= phase_index < len(config.phases):
		return config.phases[phase_index].allowlist_enabled
	logger.warning("Ledger references unknown phase %s", phase_index)
	return False


@transaction.atomic
def apply_mint_update(reference_id: str, status: str, *, token_id=None, owner_address: str | None = None, config: MintConfig | None = None) -> MintedToken | None:
	"""
	Move the ledger row for `reference_id` to the provider's reported status.

	Returns the row (unchanged when already terminal or still pending), or None when no
	row has that reference id.
	"""
	status = str(status or "").lower()
	if status not in MintStatus.values:
		raise ValueError(f"Unknown mint status '{status}' for UUID {reference_id}")

	mint = MintedToken.objects.select_for_update().filter(uuid=reference_id).first()
	if mint is None:
		logger.warning("No mint found with UUID %s", reference_id)
		return None

	if status == MintStatus.PENDING:
		logger.debug("Mint with UUID %s still pending", reference_id)
		return mint

	if mint.status != MintStatus.PENDING:
		if mint.status == status:
			logger.debug("Mint with UUID %s already %s", reference_id, status)
		else:
			logger.warning("Ignoring %s update for mint with UUID %s already %s", status, reference_id, mint.status)
		return mint

	if token_id not in (None, "") and str(token_id) != str(mint.token_id):
		logger.warning("Provider reports token %s for UUID %s, ledger has %s", token_id, reference_id, mint.token_id)
	if owner_address and owner_address.lower() != mint.wallet_address:
		logger.warning("Provider reports owner %s for UUID %s, ledger has %s", owner_address, reference_id, mint.wallet_address)

	config = config or load_mint_config()

	# Only the lock taken for this mint is released
	LockedAddress.objects.filter(address=mint.wallet_address, uuid=mint.uuid).delete()

	if status == MintStatus.SUCCEEDED and _phase_allowlisted(config, mint.phase):
		AllowlistEntry.objects.filter(
			address=mint.wallet_address, phase=mint.phase, quantity_allowed__gt=0
		).update(quantity_allowed=F("quantity_allowed") - 1)

	mint.status = status
	mint.save(update_fields=["status", "updated_at"])
	logger.info("Mint with UUID %s %s. Updating status.", reference_id, status)
	return mint


def handle_provider_notification(message: dict, *, config: MintConfig | None = None) -> MintedToken | None:
	"""
	Apply a webhook notification body: {"event_name", "data": {reference_id, token_id, status, owner_address}}.

	Events other than mint_request_updated are ignored.
	"""
	event_name = message.get("event_name")
	if event_name != MINT_REQUEST_UPDATED:
		logger.debug("Ignoring webhook event %s", event_name)
		return None
	data = message.get("data") or {}
	return apply_mint_update(
		data["reference_id"],
		data["status"],
		token_id=data.get("token_id"),
		owner_address=data.get("owner_address"),
		config=config,
	)


def reconcile_mint(mint: MintedToken, *, config: MintConfig, provider, now=None) -> str:
	"""
	Query the provider for one pending row and apply what it reports.

	Returns the outcome: "succeeded", "failed", "pending" or "resubmitted".
	"""
	request = provider.get_mint_request(mint.collection_address, mint.uuid)
	if request is None:
		# The provider never saw it (e.g. outage between commit and submit)
		now = now or timezone.now()
		age = (now - mint.created_at).total_seconds()
		if age >= settings.RECONCILE_RESUBMIT_AFTER_SECONDS:
			submit_mint_request(mint, config=config, provider=provider)
			logger.info("Re-sent missing mint request with UUID %s (token %s)", mint.uuid, mint.token_id)
			return "resubmitted"
		return "pending"

	updated = apply_mint_update(
		mint.uuid,
		request.get("status"),
		token_id=request.get("token_id"),
		owner_address=request.get("owner_address"),
		config=config,
	)
	return updated.status if updated is not None else "pending"


def reconcile_pending_mints(*, config: MintConfig | None = None, provider=None, now=None) -> dict:
	"""
	One poll pass over every pending ledger row of the collection.

	Provider outages leave rows pending for the next pass; any other error is logged and
	the pass moves on to the next row.
	"""
	config = config or load_mint_config()
	provider = provider or get_minting_adapter(config)
	summary = {"checked": 0, "succeeded": 0, "failed": 0, "pending": 0, "resubmitted": 0, "errors": 0}

	pending = list(
		MintedToken.objects.filter(collection_address=config.collection_address, status=MintStatus.PENDING).order_by("id")
	)
	if pending:
		logger.debug("Pending mints: %s", [m.uuid for m in pending])

	for mint in pending:
		summary["checked"] += 1
		try:
			outcome = reconcile_mint(mint, config=config, provider=provider, now=now)
		except ProviderUnavailable as e:
			logger.warning("Provider unavailable for mint with UUID %s, retrying next pass: %s", mint.uuid, e)
			outcome = "pending"
		except Exception:
			logger.exception("Error processing mint with UUID %s", mint.uuid)
			summary["errors"] += 1
			continue
		summary[outcome] += 1

	logger.info("Reconciliation pass: %s", summary)
	return summary
