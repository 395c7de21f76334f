"""Shared builders for mint configs and ledger rows used across the test modules."""

from core.models import AllowlistEntry, MintedToken, MintStatus
from core.phases import MintConfig, parse_phase, validate_phases

COLLECTION = "0x" + "ab" * 20
WALLET_A = "0x" + "1" * 40
WALLET_B = "0x" + "2" * 40
WALLET_C = "0x" + "3" * 40


def fixed_phase(**overrides) -> dict:
	phase = dict(
		name="Presale",
		start_time=1000,
		end_time=2000,
		start_token_id=6,
		end_token_id=10,
		enable_allow_list=True,
	)
	phase.update(overrides)
	return phase


def rollover_phase(**overrides) -> dict:
	phase = dict(
		name="Public Sale",
		start_time=2001,
		end_time=3000,
		enable_token_id_roll_over=True,
		enable_allow_list=False,
		max_tokens_per_wallet=5,
		end_token_id=20,
	)
	phase.update(overrides)
	return phase


def make_config(*raw_phases, global_cap=None, metadata_dir="") -> MintConfig:
	phases = tuple(parse_phase(p, i) for i, p in enumerate(raw_phases))
	validate_phases(phases)
	return MintConfig(
		environment="test",
		api_url="https://api.example.test",
		api_key="test-key",
		chain_name="test-chain",
		collection_address=COLLECTION,
		metadata_dir=metadata_dir,
		eoa_mint_message="Sign this message to verify your wallet address",
		phases=phases,
		max_token_supply_across_all_phases=global_cap,
		allowed_topic_arn="arn:aws:sns:us-east-2:123456789012:*",
	)


def allow(address: str, phase: int = 0, quantity: int = 1) -> AllowlistEntry:
	return AllowlistEntry.objects.create(address=address, phase=phase, quantity_allowed=quantity)


def ledger_row(token_id: int, phase: int = 0, status=MintStatus.SUCCEEDED, wallet: str = WALLET_C, uuid: str | None = None) -> MintedToken:
	return MintedToken.objects.create(
		token_id=token_id,
		collection_address=COLLECTION,
		wallet_address=wallet,
		phase=phase,
		uuid=uuid or f"ref-{phase}-{token_id}",
		status=status,
	)
