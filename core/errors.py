"""Error taxonomy for mint admission, authentication and provider calls.

Views turn any MintGateError into a JSON error body using status_code and code.
"""

from django.core.exceptions import ImproperlyConfigured


class MintGateError(Exception):
	status_code = 500
	code = "mint_gate_error"
	default_message = "Mint request failed"

	def __init__(self, message: str | None = None):
		self.message = message or self.default_message
		super().__init__(self.message)


# --- Admission (user-correctable denials, never retried automatically) -------

class AdmissionError(MintGateError):
	status_code = 403
	code = "admission_denied"


class NoActivePhase(AdmissionError):
	code = "no_active_phase"
	default_message = "No mint phase is currently active"


class WalletLocked(AdmissionError):
	code = "wallet_locked"
	default_message = "Wallet already has a mint in progress"


class CapacityExceeded(AdmissionError):
	code = "capacity_exceeded"
	default_message = "Mint supply exhausted"


class NotAllowlisted(AdmissionError):
	code = "not_allowlisted"
	default_message = "Wallet address is not on the allowlist"


class NoAllowanceLeft(AdmissionError):
	code = "no_allowance_left"
	default_message = "Wallet has no remaining mint allowance"


class WalletLimitReached(AdmissionError):
	code = "wallet_limit_reached"
	default_message = "Wallet has reached the per-wallet mint limit"


class DuplicateMint(AdmissionError):
	code = "duplicate_entry"
	default_message = "Duplicate entry for mint request"


# --- Authentication -----------------------------------------------------------

class AuthenticationError(MintGateError):
	status_code = 401
	code = "unauthorized"
	default_message = "Unauthorized"


class InvalidToken(AuthenticationError):
	code = "invalid_token"
	default_message = "Invalid ID token"


class InvalidSignature(AuthenticationError):
	code = "invalid_signature"
	default_message = "Failed to verify signature"


# --- Transient ----------------------------------------------------------------

class ProviderUnavailable(MintGateError):
	status_code = 502
	code = "provider_unavailable"
	default_message = "Minting provider unavailable"


class ConfigurationError(ImproperlyConfigured):
	"""Mint configuration cannot be used; raised at startup validation."""
