from django.apps import AppConfig


class ProviderStubConfig(AppConfig):
	default_auto_field = "django.db.models.BigAutoField"
	name = "provider_stub"
