from django.db import migrations, models


class Migration(migrations.Migration):

	initial = True

	dependencies = []

	operations = [
		migrations.CreateModel(
			name="StubMintRequest",
			fields=[
				("id", models.BigAutoField(primary_key=True, serialize=False)),
				("reference_id", models.CharField(max_length=64, unique=True)),
				("collection_address", models.CharField(max_length=42)),
				("owner_address", models.CharField(max_length=42)),
				("token_id", models.BigIntegerField(blank=True, null=True)),
				("metadata", models.JSONField(blank=True, null=True)),
				("status", models.CharField(choices=[("pending", "Pending"), ("succeeded", "Succeeded"), ("failed", "Failed")], default="pending", max_length=16)),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
			],
		),
	]
