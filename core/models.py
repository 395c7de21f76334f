"""Database models for the mint gate.


Tables:
- AllowlistEntry: per-phase wallet allowance (decremented on confirmed mints)
- LockedAddress: wallets with an outstanding mint; existence = locked
- MintStatus
- MintedToken: append-only ledger of mint attempts (status moves pending → terminal once)
- PhaseGate: one row per phase, row-locked by admissions to serialize supply checks
"""

from django.db import models


class AllowlistEntry(models.Model):
	"""
	A wallet allowed to mint in one phase, with its remaining allowance.

	uuid is the reference id of the last mint admitted for this entry.
	"""
	id = models.BigAutoField(primary_key=True)
	address = models.CharField(max_length=42)
	phase = models.PositiveIntegerField()
	quantity_allowed = models.PositiveIntegerField(default=1)
	uuid = models.CharField(max_length=64, null=True, blank=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		constraints = [
			models.UniqueConstraint(fields=["address", "phase"], name="uniq_allowlist_address_phase"),
		]


class LockedAddress(models.Model):
	"""
	A wallet currently mid-mint. Keyed by address only: one outstanding mint per wallet
	across all phases.
	"""
	address = models.CharField(max_length=42, primary_key=True)
	uuid = models.CharField(max_length=64)
	locked_at = models.DateTimeField(auto_now_add=True)


class MintStatus(models.TextChoices):
	PENDING = "pending", "Pending"
	SUCCEEDED = "succeeded", "Succeeded"
	FAILED = "failed", "Failed"


# Pending rows hold capacity until the provider resolves them.
COUNTED_STATUSES = (MintStatus.PENDING, MintStatus.SUCCEEDED)


class MintedToken(models.Model):
	"""
	One row per admitted mint attempt.

	uuid is the reference id shared with the minting provider and is unique, so a
	re-submitted stale reference is rejected by the database.
	"""
	id = models.BigAutoField(primary_key=True)
	token_id = models.BigIntegerField()
	collection_address = models.CharField(max_length=42)
	wallet_address = models.CharField(max_length=42)
	phase = models.PositiveIntegerField()
	uuid = models.CharField(max_length=64, unique=True)
	status = models.CharField(max_length=16, choices=MintStatus.choices, default=MintStatus.PENDING)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		constraints = [
			models.UniqueConstraint(fields=["collection_address", "token_id"], name="uniq_minted_collection_token"),
		]
		indexes = [
			models.Index(fields=["collection_address", "phase", "status"], name="minted_phase_status_idx"),
			models.Index(fields=["wallet_address", "phase"], name="minted_wallet_phase_idx"),
		]


class PhaseGate(models.Model):
	"""
	Lock target for admissions into a phase. Carries no counters: supply and token ids
	are always derived from MintedToken.
	"""
	collection_address = models.CharField(max_length=42)
	phase = models.PositiveIntegerField()

	class Meta:
		constraints = [
			models.UniqueConstraint(fields=["collection_address", "phase"], name="uniq_gate_collection_phase"),
		]


class CollectionGate(models.Model):
	"""
	Lock target shared by every phase of a collection. Taken before the phase gate when
	a global supply cap is configured, so admissions into different phases serialize
	on the total count.
	"""
	collection_address = models.CharField(max_length=42, unique=True)
