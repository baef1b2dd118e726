from asgiref.sync import async_to_sync
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from item_requests.models import ItemRequest
from services.container import get_matching_pipeline
from services.request_lifecycle import SellerProfileExistsError, SellerProfileNotFoundError
from sellers.serializers import (
    SellerCreateSerializer,
    SellerProfileSerializer,
    RecommendedSellerSerializer,
)
from sellers import services as seller_services


class SellerProfileView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            seller = seller_services.get_seller_profile(request.user)
        except SellerProfileNotFoundError as e:
            return Response({"error": str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response({"seller": SellerProfileSerializer(seller).data})

    def post(self, request):
        serializer = SellerCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            seller = seller_services.create_seller_profile(request.user, serializer.validated_data)
        except SellerProfileExistsError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            "message": "Seller profile created",
            "seller": SellerProfileSerializer(seller).data,
        }, status=status.HTTP_201_CREATED)


class SellerAvailabilityView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request):
        try:
            seller = seller_services.toggle_availability(request.user)
        except SellerProfileNotFoundError as e:
            return Response({"error": str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response({
            "message": "Available" if seller.is_available else "Unavailable",
            "is_available": seller.is_available,
        })


class SellerRecommendationsView(APIView):
    """
    GET: Ranked sellers that would be notified for one of the caller's
    requests. Read-only, nobody is notified.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, request_id: int):
        item_request = ItemRequest.objects.filter(id=request_id, user=request.user).first()
        if item_request is None:
            return Response({"error": "Request not found"}, status=status.HTTP_404_NOT_FOUND)

        ranked = async_to_sync(get_matching_pipeline().preview)(item_request)

        return Response({
            "request_id": item_request.id,
            "count": len(ranked),
            "sellers": RecommendedSellerSerializer(ranked, many=True).data,
        })
