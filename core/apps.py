import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class CoreConfig(AppConfig):
	default_auto_field = "django.db.models.BigAutoField"
	name = "core"

	def ready(self):
		"""
		Refuse to start with a mint configuration admission could not decide on.
		"""
		from .phases import load_mint_config

		config = load_mint_config()
		logger.debug(
			"Mint config '%s': %d phase(s) for collection %s",
			config.environment, len(config.phases), config.collection_address,
		)
