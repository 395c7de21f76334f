"""File-keyed token metadata lookup: <metadata_dir>/<token_id> holds the JSON document."""

import json
import logging
from pathlib import Path

from django.conf import settings

logger = logging.getLogger(__name__)


def get_metadata(metadata_dir: str, token_id) -> dict | None:
	if not metadata_dir:
		return None
	path = Path(metadata_dir) / str(token_id)
	try:
		return json.loads(path.read_text(encoding="utf-8"))
	except FileNotFoundError:
		logger.debug("No metadata file for token ID %s at %s", token_id, path)
		return None
	except (OSError, ValueError) as e:
		logger.warning("Unreadable metadata for token ID %s: %s", token_id, e)
		return None


def metadata_for_token(metadata_dir: str, token_id) -> dict | None:
	"""
	Metadata sent with a mint request: the token's file, else DEFAULT_TOKEN_METADATA.
	"""
	metadata = get_metadata(metadata_dir, token_id)
	if metadata is None:
		return getattr(settings, "DEFAULT_TOKEN_METADATA", None)
	return metadata
