# flowchart/views.py
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status

from .exceptions import RenderError
from .serializers import (
    ConvertRequestSerializer,
    RenderErrorSerializer,
    RequestStateSerializer,
    SubmitRequestSerializer,
)
from .services.convert import convert_algorithm
from .store import Status, get_store

import logging
logger = logging.getLogger("flowchart")


def _state_response(state, http_status=status.HTTP_200_OK):
    return Response(RequestStateSerializer(state).data, status=http_status)


@api_view(["POST"])
@permission_classes([AllowAny])
def convert(request):
    """
    вход: { algorithmText }
    выход: { mermaidCode, fullResponse } или { mermaidCode, fallback: true }
    """
    ser = ConvertRequestSerializer(data=request.data)
    if not ser.is_valid():
        return Response({"error": "Algorithm text is required"}, status=status.HTTP_400_BAD_REQUEST)

    conversion = convert_algorithm(ser.validated_data["algorithmText"])
    if conversion.fallback:
        logger.info("convert: served fallback diagram")
    return Response(conversion.as_payload(), status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([AllowAny])
def state_detail(request):
    return _state_response(get_store().state)


@api_view(["POST"])
@permission_classes([AllowAny])
def submit(request):
    ser = SubmitRequestSerializer(data=request.data)
    ser.is_valid(raise_exception=True)

    store = get_store()
    text = ser.validated_data.get("algorithmText")
    if text is not None:
        store.set_algorithm_text(text)
    state = store.submit()
    if state.status is Status.FAILED:
        return _state_response(state, status.HTTP_400_BAD_REQUEST)
    return _state_response(state)


@api_view(["POST"])
@permission_classes([AllowAny])
def regenerate(request):
    state = get_store().regenerate()
    if state.status is Status.FAILED:
        return _state_response(state, status.HTTP_400_BAD_REQUEST)
    return _state_response(state)


@api_view(["POST"])
@permission_classes([AllowAny])
def clear(request):
    return _state_response(get_store().clear())


@api_view(["POST"])
@permission_classes([AllowAny])
def render_error(request):
    ser = RenderErrorSerializer(data=request.data)
    ser.is_valid(raise_exception=True)

    store = get_store()
    if store.state.status is not Status.READY:
        return Response({"error": "no diagram to report on"}, status=status.HTTP_409_CONFLICT)
    return _state_response(store.report_render_error(RenderError(ser.validated_data["message"])))
