from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from .moodboard import services


@api_view(["GET"])
def health(request):
    """Liveness plus which providers are configured (no secrets)."""
    orchestrator = services.get_orchestrator()
    return Response(
        {
            "completion": orchestrator.completion.is_configured(),
            "images": orchestrator.images.is_configured(),
            "catalog": orchestrator.catalog.is_configured(),
            "store": services.get_store().is_configured(),
        },
        status=status.HTTP_200_OK,
    )
