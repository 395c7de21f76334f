"""In-process minting provider table to simulate asynchronous mint requests"""

from django.db import models


class StubMintRequest(models.Model):
	"""
	A mint request as the provider would hold it: accepted as pending, later settled.
	"""
	STATUSES = (("pending", "Pending"), ("succeeded", "Succeeded"), ("failed", "Failed"))

	id = models.BigAutoField(primary_key=True)
	reference_id = models.CharField(max_length=64, unique=True)
	collection_address = models.CharField(max_length=42)
	owner_address = models.CharField(max_length=42)
	token_id = models.BigIntegerField(null=True, blank=True)
	metadata = models.JSONField(null=True, blank=True)
	status = models.CharField(max_length=16, choices=STATUSES, default="pending")
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	def as_dict(self) -> dict:
		return {
			"reference_id": self.reference_id,
			"collection_address": self.collection_address,
			"owner_address": self.owner_address,
			"token_id": str(self.token_id) if self.token_id is not None else None,
			"status": self.status,
			"created_at": self.created_at.isoformat() if self.created_at else None,
			"updated_at": self.updated_at.isoformat() if self.updated_at else None,
		}
