"""Mint phase configuration and the phase resolver.

Phases come from settings.MINT_ENVIRONMENTS[settings.MINT_ENVIRONMENT]["mint_phases"]
and are parsed into one of two shapes:

- FixedRangePhase: token ids start_token_id..end_token_id (inclusive)
- RolloverPhase: ids continue from the previous phase's highest minted id; capacity is
  max_token_supply, or end_token_id minus that previous id

Everything here is pure; ledger-dependent quantities live in core.supply.
"""

from dataclasses import dataclass
from django.conf import settings

from .errors import ConfigurationError


@dataclass(frozen=True)
class FixedRangePhase:
	name: str
	start_time: int
	end_time: int
	allowlist_enabled: bool
	start_token_id: int
	end_token_id: int
	max_tokens_per_wallet: int | None = None

	@property
	def capacity(self) -> int:
		return self.end_token_id - self.start_token_id + 1


@dataclass(frozen=True)
class RolloverPhase:
	name: str
	start_time: int
	end_time: int
	allowlist_enabled: bool
	max_token_supply: int | None = None
	end_token_id: int | None = None
	max_tokens_per_wallet: int | None = None


MintPhase = FixedRangePhase | RolloverPhase


@dataclass(frozen=True)
class MintConfig:
	environment: str
	api_url: str
	api_key: str
	chain_name: str
	collection_address: str
	metadata_dir: str
	eoa_mint_message: str
	phases: tuple
	max_token_supply_across_all_phases: int | None = None
	allowed_topic_arn: str = "*"


def _require_int(raw: dict, key: str, label: str) -> int:
	if raw.get(key) is None:
		raise ConfigurationError(f"{label}: '{key}' is required")
	try:
		return int(raw[key])
	except (TypeError, ValueError):
		raise ConfigurationError(f"{label}: '{key}' must be an integer")


def _optional_int(raw: dict, key: str, label: str) -> int | None:
	if raw.get(key) is None:
		return None
	return _require_int(raw, key, label)


def parse_phase(raw: dict, index: int) -> MintPhase:
	"""
	Build the typed phase for one configuration dict.
	"""
	label = f"Mint phase {index} ({raw.get('name', '?')})"
	common = dict(
		name=str(raw.get("name") or f"Phase {index}"),
		start_time=_require_int(raw, "start_time", label),
		end_time=_require_int(raw, "end_time", label),
		allowlist_enabled=bool(raw.get("enable_allow_list", False)),
		max_tokens_per_wallet=_optional_int(raw, "max_tokens_per_wallet", label),
	)

	if raw.get("enable_token_id_roll_over"):
		if raw.get("start_token_id") is not None:
			raise ConfigurationError(f"{label}: a roll-over phase cannot define start_token_id")
		phase = RolloverPhase(
			max_token_supply=_optional_int(raw, "max_token_supply", label),
			end_token_id=_optional_int(raw, "end_token_id", label),
			**common,
		)
		if phase.max_token_supply is None and phase.end_token_id is None:
			raise ConfigurationError(f"{label}: roll-over phase needs max_token_supply or end_token_id")
	else:
		phase = FixedRangePhase(
			start_token_id=_require_int(raw, "start_token_id", label),
			end_token_id=_require_int(raw, "end_token_id", label),
			**common,
		)
		if phase.start_token_id > phase.end_token_id:
			raise ConfigurationError(f"{label}: start_token_id is after end_token_id")

	if phase.start_time >= phase.end_time:
		raise ConfigurationError(f"{label}: start_time must be before end_time")
	if not phase.allowlist_enabled and phase.max_tokens_per_wallet is None:
		raise ConfigurationError(f"{label}: phases without an allowlist must set max_tokens_per_wallet")
	return phase


def validate_phases(phases) -> None:
	"""
	Cross-phase checks: windows and fixed ranges never overlap, roll-over needs a predecessor.
	"""
	if not phases:
		raise ConfigurationError("At least one mint phase must be configured")

	if isinstance(phases[0], RolloverPhase):
		raise ConfigurationError(f"Mint phase 0 ({phases[0].name}) cannot roll over: there is no previous phase")

	for i, a in enumerate(phases):
		for b in phases[i + 1:]:
			if a.start_time <= b.end_time and b.start_time <= a.end_time:
				raise ConfigurationError(f"Mint phases '{a.name}' and '{b.name}' have overlapping time windows")
			if isinstance(a, FixedRangePhase) and isinstance(b, FixedRangePhase):
				if a.start_token_id <= b.end_token_id and b.start_token_id <= a.end_token_id:
					raise ConfigurationError(f"Mint phases '{a.name}' and '{b.name}' have overlapping token id ranges")


def load_mint_config(environment: str | None = None) -> MintConfig:
	"""
	Read and validate the mint configuration for the selected environment.

	Raises ConfigurationError on anything that would make admission undecidable.
	"""
	environment = environment or settings.MINT_ENVIRONMENT
	environments = getattr(settings, "MINT_ENVIRONMENTS", {})
	if environment not in environments:
		raise ConfigurationError(f"Unknown MINT_ENVIRONMENT '{environment}'")
	raw = environments[environment]

	try:
		phases = tuple(parse_phase(p, i) for i, p in enumerate(raw.get("mint_phases") or []))
		validate_phases(phases)
		global_cap = raw.get("max_token_supply_across_all_phases")
		return MintConfig(
			environment=environment,
			api_url=raw.get("api_url", ""),
			api_key=raw.get("api_key", ""),
			chain_name=raw["chain_name"],
			collection_address=str(raw["collection_address"]).lower(),
			metadata_dir=raw.get("metadata_dir", ""),
			eoa_mint_message=raw.get("eoa_mint_message", ""),
			phases=phases,
			max_token_supply_across_all_phases=int(global_cap) if global_cap is not None else None,
			allowed_topic_arn=raw.get("allowed_topic_arn", "*"),
		)
	except KeyError as e:
		raise ConfigurationError(f"Mint environment '{environment}' is missing {e}")


def is_phase_active(phase: MintPhase, now: int) -> bool:
	return phase.start_time <= now <= phase.end_time


def active_phase(now: int, phases) -> tuple[MintPhase, int] | None:
	"""
	First phase (in configured order) whose [start_time, end_time] contains now.

	Windows never overlap in a valid config; if they do, the first match wins.
	"""
	for index, phase in enumerate(phases):
		if is_phase_active(phase, now):
			return phase, index
	return None


def phase_summary(phase: MintPhase) -> dict:
	"""
	Public shape of a phase for the config/eligibility endpoints.
	"""
	data = {
		"name": phase.name,
		"startTime": phase.start_time,
		"endTime": phase.end_time,
		"enableAllowList": phase.allowlist_enabled,
	}
	if isinstance(phase, FixedRangePhase):
		data["startTokenID"] = phase.start_token_id
		data["endTokenID"] = phase.end_token_id
	else:
		data["enableTokenIDRollOver"] = True
		if phase.end_token_id is not None:
			data["endTokenID"] = phase.end_token_id
		if phase.max_token_supply is not None:
			data["maxTokenSupply"] = phase.max_token_supply
	if phase.max_tokens_per_wallet is not None:
		data["maxTokensPerWallet"] = phase.max_tokens_per_wallet
	return data
