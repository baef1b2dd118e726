import logging

from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from seller_responses import services as response_services
from seller_responses.models import SellerResponse
from seller_responses.serializers import (
    ResponseCreateSerializer,
    ResponseStatusSerializer,
    SellerResponseSerializer,
)
from services.request_lifecycle import (
    RequestNotFoundError,
    RequestNotEditableError,
    ResponseForbiddenError,
    ResponseNotAllowedError,
    ResponseNotFoundError,
    SellerProfileNotFoundError,
)

logger = logging.getLogger(__name__)


class ResponseCreateView(APIView):
    """
    POST: Answer a request as a seller. The author is notified in the
    background.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ResponseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            response = response_services.create_response(request.user, data["request_id"], data)
        except RequestNotFoundError as e:
            return Response({"error": str(e)}, status=status.HTTP_404_NOT_FOUND)
        except SellerProfileNotFoundError as e:
            return Response({"error": str(e)}, status=status.HTTP_403_FORBIDDEN)
        except (RequestNotEditableError, ResponseNotAllowedError) as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            "message": "Response sent",
            "response": SellerResponseSerializer(response).data,
        }, status=status.HTTP_201_CREATED)


class RequestResponsesView(APIView):
    """
    GET: All responses on one of the caller's requests, newest first.
    Listing marks them as read.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, request_id: int):
        try:
            responses = response_services.list_request_responses(request.user, request_id)
        except RequestNotFoundError as e:
            return Response({"error": str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ResponseForbiddenError as e:
            return Response({"error": str(e)}, status=status.HTTP_403_FORBIDDEN)

        data = SellerResponseSerializer(responses, many=True).data
        return Response({"count": len(data), "responses": data})


class MyResponsesView(APIView):
    """
    GET: Responses the caller sent as a seller. Optional ?status= filter.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        status_filter = request.query_params.get("status")
        if status_filter:
            valid = {choice for choice, _ in SellerResponse.STATUS_CHOICES}
            if status_filter not in valid:
                return Response({"error": f"Invalid status: {status_filter}"}, status=status.HTTP_400_BAD_REQUEST)

        qs = response_services.list_seller_responses(request.user, status_filter)

        paginator = PageNumberPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(SellerResponseSerializer(page, many=True).data)


class ResponseDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, response_id: int):
        try:
            response = response_services.get_response_for_viewer(request.user, response_id)
        except ResponseNotFoundError as e:
            return Response({"error": str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ResponseForbiddenError as e:
            return Response({"error": str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response({"response": SellerResponseSerializer(response).data})

    def delete(self, request, response_id: int):
        try:
            response_services.withdraw_response(request.user, response_id)
        except ResponseNotFoundError as e:
            return Response({"error": str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ResponseForbiddenError as e:
            return Response({"error": str(e)}, status=status.HTTP_403_FORBIDDEN)
        except ResponseNotAllowedError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"message": "Response withdrawn"})


class ResponseStatusView(APIView):
    """
    PATCH: The request author accepts or declines a pending response,
    optionally with feedback. The seller is notified in the background.
    """
    permission_classes = [IsAuthenticated]

    def patch(self, request, response_id: int):
        serializer = ResponseStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            response = response_services.update_response_status(
                request.user,
                response_id,
                serializer.validated_data["status"],
                feedback=serializer.validated_data.get("feedback"),
            )
        except ResponseNotFoundError as e:
            return Response({"error": str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ResponseForbiddenError as e:
            return Response({"error": str(e)}, status=status.HTTP_403_FORBIDDEN)
        except ResponseNotAllowedError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            "message": f"Response {response.status}",
            "response": SellerResponseSerializer(response).data,
        })
