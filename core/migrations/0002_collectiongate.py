from django.db import migrations, models


class Migration(migrations.Migration):

	dependencies = [
		("core", "0001_initial"),
	]

	operations = [
		migrations.CreateModel(
			name="CollectionGate",
			fields=[
				("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
				("collection_address", models.CharField(max_length=42, unique=True)),
			],
		),
	]
