"""Supply accounting and token id allocation.

Every number here is derived from the MintedToken ledger at call time; there are no
in-process counters. Callers that act on the result (admission) must hold the phase
gate lock inside the same transaction.

- minted counts include pending rows: a pending mint already reserved its capacity
- token ids are taken from rows of any status: a failed id was seen by the provider
  and is never reissued
"""

from django.db.models import Max

from .errors import CapacityExceeded, ConfigurationError
from .models import COUNTED_STATUSES, MintedToken
from .phases import FixedRangePhase, MintConfig


def _ledger(config: MintConfig):
	return MintedToken.objects.filter(collection_address=config.collection_address)


def max_token_id(config: MintConfig, phase_index: int) -> int | None:
	"""
	Highest token id recorded for the phase, whatever its status; None if nothing yet.
	"""
	return _ledger(config).filter(phase=phase_index).aggregate(m=Max("token_id"))["m"]


def previous_phase_max_token_id(config: MintConfig, phase_index: int) -> int:
	"""
	The id a roll-over phase continues from.

	If the previous phase minted nothing, its floor is used instead: the id before its
	fixed start, or (for a roll-over predecessor) whatever that phase continued from.
	"""
	if phase_index <= 0:
		raise ConfigurationError("The first mint phase has no previous phase to roll over from")
	prev_index = phase_index - 1
	prev_max = max_token_id(config, prev_index)
	if prev_max is not None:
		return prev_max
	prev = config.phases[prev_index]
	if isinstance(prev, FixedRangePhase):
		return prev.start_token_id - 1
	return previous_phase_max_token_id(config, prev_index)


def phase_capacity(config: MintConfig, phase_index: int) -> int:
	phase = config.phases[phase_index]
	if isinstance(phase, FixedRangePhase):
		return phase.capacity
	if phase.max_token_supply is not None:
		return phase.max_token_supply
	if phase.end_token_id is not None:
		return max(0, phase.end_token_id - previous_phase_max_token_id(config, phase_index))
	raise ConfigurationError(f"Mint phase '{phase.name}' has no derivable capacity")


def phase_minted_count(config: MintConfig, phase_index: int) -> int:
	return _ledger(config).filter(phase=phase_index, status__in=COUNTED_STATUSES).count()


def total_minted_count(config: MintConfig) -> int:
	return _ledger(config).filter(status__in=COUNTED_STATUSES).count()


def wallet_minted_count(config: MintConfig, wallet_address: str, phase_index: int) -> int:
	return _ledger(config).filter(
		wallet_address=wallet_address, phase=phase_index, status__in=COUNTED_STATUSES
	).count()


def check_capacity(config: MintConfig, phase_index: int) -> None:
	"""
	Raise CapacityExceeded if the phase or the global supply is used up.
	"""
	phase = config.phases[phase_index]
	minted = phase_minted_count(config, phase_index)
	capacity = phase_capacity(config, phase_index)
	if minted >= capacity:
		raise CapacityExceeded(f"Phase '{phase.name}' supply exhausted ({minted}/{capacity})")

	global_cap = config.max_token_supply_across_all_phases
	if global_cap is not None:
		total = total_minted_count(config)
		if total >= global_cap:
			raise CapacityExceeded(f"Total supply across all phases exhausted ({total}/{global_cap})")


def first_token_id(config: MintConfig, phase_index: int) -> int:
	phase = config.phases[phase_index]
	if isinstance(phase, FixedRangePhase):
		return phase.start_token_id
	return previous_phase_max_token_id(config, phase_index) + 1


def last_token_id(config: MintConfig, phase_index: int) -> int | None:
	"""Upper bound of the phase's id range; None for an open-ended roll-over phase."""
	return config.phases[phase_index].end_token_id


def next_token_id(config: MintConfig, phase_index: int) -> int:
	"""
	Next id for the phase: its first id if nothing is recorded yet, else max + 1.

	Ids consumed by failed mints leave gaps in the count, so the range bound is checked
	on the id itself as well as by check_capacity.
	"""
	current = max_token_id(config, phase_index)
	token_id = first_token_id(config, phase_index) if current is None else current + 1

	upper = last_token_id(config, phase_index)
	if upper is not None and token_id > upper:
		phase = config.phases[phase_index]
		raise CapacityExceeded(f"Phase '{phase.name}' token id range exhausted")
	return token_id


def phase_for_token_id(config: MintConfig, token_id: int) -> int | None:
	"""
	Phase index owning a token id: the ledger first, then the fixed ranges.
	"""
	recorded = _ledger(config).filter(token_id=token_id).values_list("phase", flat=True).first()
	if recorded is not None:
		return recorded
	for index, phase in enumerate(config.phases):
		if isinstance(phase, FixedRangePhase) and phase.start_token_id <= token_id <= phase.end_token_id:
			return index
	return None
