from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.tokens import RefreshToken

from sellers.models import Seller
from .serializers import (
    RegisterSerializer,
    UserSerializer,
    PushTokenRegisterSerializer,
    DeviceTokenSerializer,
)
from . import services


class RegisterView(APIView):
    """
    Register a new user account

    POST Body:
    {
        "username": "marie",
        "email": "marie@example.com",
        "password": "password123",
        "first_name": "Marie",
        "phone_number": "+33612345678"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        # Generate JWT tokens
        refresh = RefreshToken.for_user(user)

        return Response({
            'message': 'User registered successfully',
            'user': UserSerializer(user).data,
            'tokens': {
                'refresh': str(refresh),
                'access': str(refresh.access_token),
            }
        }, status=status.HTTP_201_CREATED)


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)


class PushTokenRegisterView(APIView):
    """
    Register or replace the caller's Expo push token

    POST Body:
    {
        "expo_push_token": "ExponentPushToken[xxxxxxxx]",
        "device_info": {"platform": "ios", "model": "iPhone 15"}
    }
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = PushTokenRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        services.register_device_token(
            request.user,
            serializer.validated_data["expo_push_token"],
            serializer.validated_data.get("device_info"),
        )

        return Response({
            "message": "Push token registered",
            "token_registered": True,
            "seller_profile": Seller.objects.filter(user=request.user).exists(),
        })


class PushTokenUnregisterView(APIView):
    permission_classes = [IsAuthenticated]

    def delete(self, request):
        removed = services.unregister_device_token(request.user)
        return Response({
            "message": "Push token removed" if removed else "No push token registered",
            "removed": removed,
        })


class PushTokenStatusView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        device = services.get_device_token(request.user)
        return Response({
            "has_token": device is not None,
            "device": DeviceTokenSerializer(device).data if device else None,
            "seller_profile": Seller.objects.filter(user=request.user).exists(),
        })
