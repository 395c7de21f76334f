"""Mint admission: check → reserve → call provider.

One atomic transaction resolves the active phase, locks that phase's gate row (and the
collection gate when a global cap is set), checks the wallet lock, supply, allowlist
and per-wallet limit, allocates the next token id, and writes the pending ledger row
plus the wallet lock. The provider is only called after that transaction commits; a
failed call leaves the row pending for core.reconciliation to resolve.
"""

import logging
import time
import uuid
from dataclasses import dataclass

from django.db import IntegrityError, transaction

from .adapters.metadata_adapter import metadata_for_token
from .adapters.minting_adapter import get_minting_adapter
from .addresses import normalize_address
from .errors import (
	DuplicateMint, NoActivePhase, NoAllowanceLeft, NotAllowlisted, ProviderUnavailable,
	WalletLimitReached, WalletLocked,
)
from .models import AllowlistEntry, CollectionGate, LockedAddress, MintedToken, MintStatus, PhaseGate
from .phases import MintConfig, active_phase, is_phase_active, load_mint_config, phase_summary
from .supply import (
	check_capacity, next_token_id, phase_capacity, phase_minted_count, total_minted_count,
	wallet_minted_count,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MintReservation:
	token_id: int
	uuid: str
	collection_address: str
	wallet_address: str
	phase: int
	phase_name: str

	def as_response(self) -> dict:
		return {
			"tokenID": self.token_id,
			"collectionAddress": self.collection_address,
			"walletAddress": self.wallet_address,
			"uuid": self.uuid,
		}


def _lock_phase_gate(config: MintConfig, phase_index: int) -> PhaseGate:
	"""
	Row-lock the gate for this phase so capacity checks and id allocation serialize.
	"""
	gate, _ = PhaseGate.objects.get_or_create(collection_address=config.collection_address, phase=phase_index)
	return PhaseGate.objects.select_for_update().get(pk=gate.pk)


def _lock_collection_gate(config: MintConfig) -> CollectionGate:
	"""
	Row-lock the collection-wide gate so the global supply check serializes across phases.
	"""
	gate, _ = CollectionGate.objects.get_or_create(collection_address=config.collection_address)
	return CollectionGate.objects.select_for_update().get(pk=gate.pk)


@transaction.atomic
def reserve_mint(wallet_address: str, *, now: int, config: MintConfig) -> MintReservation:
	"""
	Decide admission for `wallet_address` at unix time `now` and, if admitted, write the
	pending ledger row and the wallet lock. Any raised error rolls everything back.
	"""
	resolved = active_phase(now, config.phases)
	if resolved is None:
		raise NoActivePhase()
	phase, phase_index = resolved

	# Collection gate first, then phase gate: one lock order for every admission
	if config.max_token_supply_across_all_phases is not None:
		_lock_collection_gate(config)
	_lock_phase_gate(config, phase_index)

	if LockedAddress.objects.filter(address=wallet_address).exists():
		raise WalletLocked()

	check_capacity(config, phase_index)

	entry = None
	if phase.allowlist_enabled:
		entry = AllowlistEntry.objects.select_for_update().filter(address=wallet_address, phase=phase_index).first()
		if entry is None:
			raise NotAllowlisted()
		if entry.quantity_allowed <= 0:
			raise NoAllowanceLeft()

	if phase.max_tokens_per_wallet is not None:
		minted = wallet_minted_count(config, wallet_address, phase_index)
		if minted >= phase.max_tokens_per_wallet:
			raise WalletLimitReached(
				f"Wallet has reached the per-wallet mint limit for '{phase.name}' ({minted}/{phase.max_tokens_per_wallet})"
			)

	token_id = next_token_id(config, phase_index)
	reference_id = str(uuid.uuid4())

	try:
		with transaction.atomic():
			MintedToken.objects.create(
				token_id=token_id,
				collection_address=config.collection_address,
				wallet_address=wallet_address,
				phase=phase_index,
				uuid=reference_id,
				status=MintStatus.PENDING,
			)
			LockedAddress.objects.create(address=wallet_address, uuid=reference_id)
	except IntegrityError as e:
		# Lost a race on the wallet lock, or a stale reference/token id collided
		if LockedAddress.objects.filter(address=wallet_address).exists():
			raise WalletLocked() from e
		logger.error("Unique constraint failed for address %s: %s", wallet_address, e)
		raise DuplicateMint() from e

	if entry is not None:
		entry.uuid = reference_id
		entry.save(update_fields=["uuid", "updated_at"])

	return MintReservation(
		token_id=token_id,
		uuid=reference_id,
		collection_address=config.collection_address,
		wallet_address=wallet_address,
		phase=phase_index,
		phase_name=phase.name,
	)


def submit_mint_request(mint, *, config: MintConfig, provider=None):
	"""
	Send one mint to the provider. `mint` is a MintReservation or MintedToken row; the
	reference id and token id are always the ones recorded in the ledger.
	"""
	provider = provider or get_minting_adapter(config)
	metadata = metadata_for_token(config.metadata_dir, mint.token_id)
	return provider.create_mint_request(
		mint.collection_address,
		mint.wallet_address,
		mint.uuid,
		token_id=mint.token_id,
		metadata=metadata,
	)


def admit_mint(wallet_address: str, *, now: int | None = None, config: MintConfig | None = None, provider=None) -> MintReservation:
	"""
	Admit and submit a mint for `wallet_address`.

	Returns once the reservation has committed. Submission errors are logged and not
	raised: the ledger row stays pending and the reconciliation pass re-sends or
	resolves it.
	"""
	config = config or load_mint_config()
	wallet_address = normalize_address(wallet_address)
	now = int(time.time()) if now is None else now

	reservation = reserve_mint(wallet_address, now=now, config=config)
	logger.info(
		"Admitted mint of token %s in phase '%s' for %s with UUID %s",
		reservation.token_id, reservation.phase_name, wallet_address, reservation.uuid,
	)

	try:
		submit_mint_request(reservation, config=config, provider=provider)
	except ProviderUnavailable as e:
		logger.error("Minting API call failed for UUID %s, left pending: %s", reservation.uuid, e)
	except Exception:
		# The reservation has committed; reconciliation resolves or re-sends it
		logger.exception("Unexpected error submitting mint with UUID %s, left pending", reservation.uuid)

	return reservation


# --- Read-only views of admission state --------------------------------------

def supply_summary(config: MintConfig | None = None) -> dict:
	"""
	Phases with capacity and minted counts, for GET /config.
	"""
	config = config or load_mint_config()
	phases = []
	for index, phase in enumerate(config.phases):
		data = phase_summary(phase)
		data["capacity"] = phase_capacity(config, index)
		data["totalMinted"] = phase_minted_count(config, index)
		phases.append(data)
	return {
		"chainName": config.chain_name,
		"collectionAddress": config.collection_address,
		"maxTokenSupplyAcrossAllPhases": config.max_token_supply_across_all_phases,
		"totalMinted": total_minted_count(config),
		"mintPhases": phases,
	}


def wallet_eligibility(wallet_address: str, *, now: int | None = None, config: MintConfig | None = None) -> dict:
	"""
	Per-phase eligibility of a wallet, without side effects.
	"""
	config = config or load_mint_config()
	wallet_address = normalize_address(wallet_address)
	now = int(time.time()) if now is None else now

	entries = {
		e.phase: e for e in AllowlistEntry.objects.filter(address=wallet_address)
	}
	phases = []
	for index, phase in enumerate(config.phases):
		data = phase_summary(phase)
		data["isActive"] = is_phase_active(phase, now)
		data["walletMinted"] = wallet_minted_count(config, wallet_address, index)

		eligible = True
		if phase.allowlist_enabled:
			entry = entries.get(index)
			data["isAllowListed"] = entry is not None
			eligible = entry is not None and entry.quantity_allowed > 0
			if entry is not None:
				data["walletTokenAllowance"] = entry.quantity_allowed
		if phase.max_tokens_per_wallet is not None:
			eligible = eligible and data["walletMinted"] < phase.max_tokens_per_wallet
		data["isEligible"] = eligible
		phases.append(data)

	return {
		"chainName": config.chain_name,
		"collectionAddress": config.collection_address,
		"maxTokenSupplyAcrossAllPhases": config.max_token_supply_across_all_phases,
		"walletAddress": wallet_address,
		"isLocked": LockedAddress.objects.filter(address=wallet_address).exists(),
		"mintPhases": phases,
	}
