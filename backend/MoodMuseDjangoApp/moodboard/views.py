import logging

from pydantic import ValidationError
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from MoodMuseDjangoApp.errors import OrchestrationError, ProviderErrorKind
from MoodMuseDjangoApp.music.spotify_client import playlist_share_url
from . import services
from .fallbacks import demo_moodboard
from .schema import MoodboardResult, clamp_mood

log = logging.getLogger(__name__)


@api_view(["POST"])
def moodboard_create(request):
    """
    Body: { "mood": "<free text, 1-500 chars>" }

    200 -> MoodboardResult (possibly built from fallbacks; there is no degraded flag)
    200 + "demo": true -> completion provider not configured, static demo board
    400 -> missing/blank mood
    502 -> completion stage failed; the client should offer a retry
    """
    body = request.data or {}
    if not isinstance(body, dict):
        return Response({"detail": "Request body must be a JSON object."}, status=status.HTTP_400_BAD_REQUEST)
    try:
        mood = clamp_mood(body.get("mood"))
    except ValueError:
        return Response({"detail": "Provide a non-empty 'mood' string."}, status=status.HTTP_400_BAD_REQUEST)

    try:
        result = services.get_orchestrator().create_moodboard(mood)
    except OrchestrationError as e:
        cause = e.cause
        if cause.kind is ProviderErrorKind.UNCONFIGURED:
            log.warning("Completion provider not configured, serving demo moodboard")
            data = demo_moodboard(mood).to_json()
            data["demo"] = True
            return Response(data, status=status.HTTP_200_OK)
        return Response(
            {
                "detail": "Failed to create moodboard. Please try again.",
                "stage": e.stage,
                "kind": cause.kind.value,
                "status": cause.status,
                "problems": cause.problems,
                "retryable": True,
            },
            status=status.HTTP_502_BAD_GATEWAY,
        )

    return Response(result.to_json(), status=status.HTTP_200_OK)


@api_view(["POST"])
def moodboard_save(request):
    """
    Body: { "moodboard": <MoodboardResult JSON> }
    201 -> { "id": "<slug>", "shareUrl": "<base>/board/<slug>" }
    """
    body = request.data or {}
    if not isinstance(body, dict):
        return Response({"detail": "Request body must be a JSON object."}, status=status.HTTP_400_BAD_REQUEST)
    payload = body.get("moodboard")
    if not isinstance(payload, dict):
        return Response({"detail": "Provide 'moodboard' as an object."}, status=status.HTTP_400_BAD_REQUEST)
    try:
        result = MoodboardResult.model_validate(payload)
    except ValidationError as ve:
        return Response({"detail": "Invalid moodboard", "error": str(ve)}, status=status.HTTP_400_BAD_REQUEST)

    store = services.get_store()
    moodboard_id = store.save(result)
    return Response(
        {"id": moodboard_id, "shareUrl": store.share_url(moodboard_id)},
        status=status.HTTP_201_CREATED,
    )


@api_view(["GET"])
def moodboard_detail(request, moodboard_id: str):
    store = services.get_store()
    record = store.get(moodboard_id)
    if record is None:
        return Response({"detail": "Moodboard not found"}, status=status.HTTP_404_NOT_FOUND)

    data = record.to_json()
    data["shareUrl"] = store.share_url(record.id)
    data["playlistUrl"] = playlist_share_url(record.playlist)
    return Response(data, status=status.HTTP_200_OK)
