from rest_framework import serializers

from realtime.push import ExpoPushChannel
from .models import User, DeviceToken


class UserSerializer(serializers.ModelSerializer):

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "role",
            "phone_number",
            "avatar",
        ]
        read_only_fields = ["id", "role"]


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model = User
        fields = ['username', 'password', 'email', 'first_name', 'last_name', 'phone_number']

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already exists")
        return value.lower()

    def create(self, validated_data):
        # Sellers start as plain users; creating a seller profile upgrades the role
        return User.objects.create_user(role='user', **validated_data)


class DeviceInfoSerializer(serializers.Serializer):
    platform = serializers.CharField(max_length=20, required=False, allow_blank=True)
    model = serializers.CharField(max_length=100, required=False, allow_blank=True)
    os_version = serializers.CharField(max_length=50, required=False, allow_blank=True)
    app_version = serializers.CharField(max_length=50, required=False, allow_blank=True)


class PushTokenRegisterSerializer(serializers.Serializer):
    expo_push_token = serializers.CharField(max_length=255)
    device_info = DeviceInfoSerializer(required=False)

    def validate_expo_push_token(self, value):
        if not ExpoPushChannel.validate_token(value):
            raise serializers.ValidationError("Invalid Expo push token")
        return value


class DeviceTokenSerializer(serializers.ModelSerializer):
    token_preview = serializers.SerializerMethodField()
    is_valid_token = serializers.SerializerMethodField()

    class Meta:
        model = DeviceToken
        fields = [
            "token_preview",
            "is_valid_token",
            "platform",
            "device_model",
            "os_version",
            "app_version",
            "updated_at",
        ]

    def get_token_preview(self, obj):
        return f"{obj.token[:20]}..." if obj.token else None

    def get_is_valid_token(self, obj):
        return ExpoPushChannel.validate_token(obj.token)
