from django.urls import path
from .views import mint_requests, mint_request, settle


urlpatterns = [
	path("collections/<str:collection>/mint-requests", mint_requests),
	path("collections/<str:collection>/mint-requests/<str:reference_id>", mint_request),
	path("collections/<str:collection>/mint-requests/<str:reference_id>/settle", settle),
]
