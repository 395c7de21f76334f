"""URL routing for the mint API + the local provider stub.


The root namespace exposes mint, eligibility and webhook endpoints; /stub/provider/
exposes the deterministic minting provider used when MINTING_PROVIDER=stub.
"""

from django.urls import path, include


urlpatterns = [
	path("", include("api.urls")),
	path("stub/provider/", include("provider_stub.urls")),
]
