import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.categories import get_all_categories, get_sub_categories, is_valid_category
from item_requests.models import ItemRequest
from item_requests.serializers import (
    ItemRequestCreateSerializer,
    ItemRequestSerializer,
    CancelRequestSerializer,
)
from services.request_lifecycle import (
    create_item_request,
    get_request_for_viewer,
    complete_request,
    cancel_request,
    RequestNotFoundError,
    RequestNotEditableError,
)

logger = logging.getLogger(__name__)


@api_view(["GET"])
@permission_classes([AllowAny])
def category_list(request):
    """All categories with their sub-category count."""
    return Response({"categories": get_all_categories()})


@api_view(["GET"])
@permission_classes([AllowAny])
def sub_category_list(request, category_id: str):
    if not is_valid_category(category_id):
        return Response({"error": "Category not found"}, status=status.HTTP_404_NOT_FOUND)
    return Response({
        "category": category_id,
        "sub_categories": get_sub_categories(category_id),
    })


class ItemRequestCreateView(APIView):
    """
    POST: Create a request. Matching sellers are notified in the background;
    the response does not wait for them.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ItemRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item_request = create_item_request(request.user, serializer.to_model_fields())

        return Response({
            "message": "Request created",
            "request": ItemRequestSerializer(item_request).data,
            "notifications": {
                "status": "processing",
                "message": "Nearby sellers are being notified",
            },
        }, status=status.HTTP_201_CREATED)


class MyRequestsView(APIView):
    """
    GET: The caller's requests, newest first. Optional ?status= filter.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = ItemRequest.objects.filter(user=request.user).select_related("user")

        status_filter = request.query_params.get("status")
        if status_filter:
            valid = {choice for choice, _ in ItemRequest.STATUS_CHOICES}
            if status_filter not in valid:
                return Response({"error": f"Invalid status: {status_filter}"}, status=status.HTTP_400_BAD_REQUEST)
            qs = qs.filter(status=status_filter)

        paginator = PageNumberPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(ItemRequestSerializer(page, many=True).data)


class ItemRequestDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, request_id: int):
        try:
            item_request = get_request_for_viewer(request_id, request.user)
        except RequestNotFoundError as e:
            return Response({"error": str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response({"request": ItemRequestSerializer(item_request).data})


class CompleteRequestView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, request_id: int):
        try:
            item_request = complete_request(request.user, request_id)
        except RequestNotFoundError as e:
            return Response({"error": str(e)}, status=status.HTTP_404_NOT_FOUND)
        except RequestNotEditableError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            "message": "Request marked as completed",
            "request": ItemRequestSerializer(item_request).data,
        })


class CancelRequestView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, request_id: int):
        serializer = CancelRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            item_request = cancel_request(
                request.user,
                request_id,
                reason=serializer.validated_data.get("reason"),
            )
        except RequestNotFoundError as e:
            return Response({"error": str(e)}, status=status.HTTP_404_NOT_FOUND)
        except RequestNotEditableError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            "message": "Request cancelled",
            "request": ItemRequestSerializer(item_request).data,
        })
