"""Public API surface of the mint gate.

- /mint/passport, /mint/eoa: admit a mint for an authenticated wallet
- /webhook: minting provider notifications (reconciliation)
- /config, /eligibility/<address>, /get-mint-request/<reference_id>: read-only views
"""

from django.urls import path
from .views_ops import health, mint_passport, mint_eoa, mint_webhook
from .views_read import mint_config, eligibility, get_mint_request, eoa_mint_message


urlpatterns = [
	path("health", health),
	path("mint/passport", mint_passport),
	path("mint/eoa", mint_eoa),
	path("webhook", mint_webhook),
	path("config", mint_config),
	path("eligibility/<str:address>", eligibility),
	path("get-mint-request/<str:reference_id>", get_mint_request),
	path("get-eoa-mint-message", eoa_mint_message),
]
