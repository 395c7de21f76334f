"""Wallet address helpers shared across admission, allowlist loading and views.

Addresses are stored lower-case; checksummed input is accepted.
"""

from eth_utils import is_address


def normalize_address(address: str) -> str:
	"""
	Validate an EVM address and return its lower-case form.
	"""
	address = (address or "").strip()
	if not is_address(address):
		raise ValueError(f"Invalid wallet address: {address!r}")
	return address.lower()


def is_valid_address(address: str) -> bool:
	return bool(address) and is_address(address.strip())
