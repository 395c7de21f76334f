from django.db import migrations, models


class Migration(migrations.Migration):

	initial = True

	dependencies = []

	operations = [
		migrations.CreateModel(
			name="AllowlistEntry",
			fields=[
				("id", models.BigAutoField(primary_key=True, serialize=False)),
				("address", models.CharField(max_length=42)),
				("phase", models.PositiveIntegerField()),
				("quantity_allowed", models.PositiveIntegerField(default=1)),
				("uuid", models.CharField(blank=True, max_length=64, null=True)),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
			],
			options={
				"constraints": [
					models.UniqueConstraint(fields=("address", "phase"), name="uniq_allowlist_address_phase"),
				],
			},
		),
		migrations.CreateModel(
			name="LockedAddress",
			fields=[
				("address", models.CharField(max_length=42, primary_key=True, serialize=False)),
				("uuid", models.CharField(max_length=64)),
				("locked_at", models.DateTimeField(auto_now_add=True)),
			],
		),
		migrations.CreateModel(
			name="MintedToken",
			fields=[
				("id", models.BigAutoField(primary_key=True, serialize=False)),
				("token_id", models.BigIntegerField()),
				("collection_address", models.CharField(max_length=42)),
				("wallet_address", models.CharField(max_length=42)),
				("phase", models.PositiveIntegerField()),
				("uuid", models.CharField(max_length=64, unique=True)),
				("status", models.CharField(choices=[("pending", "Pending"), ("succeeded", "Succeeded"), ("failed", "Failed")], default="pending", max_length=16)),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
			],
			options={
				"constraints": [
					models.UniqueConstraint(fields=("collection_address", "token_id"), name="uniq_minted_collection_token"),
				],
				"indexes": [
					models.Index(fields=["collection_address", "phase", "status"], name="minted_phase_status_idx"),
					models.Index(fields=["wallet_address", "phase"], name="minted_wallet_phase_idx"),
				],
			},
		),
		migrations.CreateModel(
			name="PhaseGate",
			fields=[
				("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
				("collection_address", models.CharField(max_length=42)),
				("phase", models.PositiveIntegerField()),
			],
			options={
				"constraints": [
					models.UniqueConstraint(fields=("collection_address", "phase"), name="uniq_gate_collection_phase"),
				],
			},
		),
	]
