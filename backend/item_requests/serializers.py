import math

from django.utils import timezone
from rest_framework import serializers

from common.categories import (
    CATEGORY_CHOICES,
    get_category_display_name,
    validate_category_and_sub_category,
)
from common.serializers import LocationSerializer, location_representation
from item_requests.models import ItemRequest, normalize_tags

MAX_PHOTOS = 5


class PhotoSerializer(serializers.Serializer):
    url = serializers.URLField()
    alt = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")


class ItemRequestCreateSerializer(serializers.Serializer):
    """
    Input for POST /api/requests/.

    Rejects bad category/sub-category pairs, malformed coordinates and
    out-of-range radius before anything is saved.
    """
    title = serializers.CharField(min_length=3, max_length=100)
    description = serializers.CharField(min_length=10, max_length=1000)
    category = serializers.ChoiceField(choices=CATEGORY_CHOICES)
    sub_category = serializers.CharField(max_length=50)
    photos = PhotoSerializer(many=True, required=False, default=list)
    location = LocationSerializer()
    radius = serializers.IntegerField(min_value=1, max_value=100, default=5)
    priority = serializers.ChoiceField(choices=ItemRequest.PRIORITY_CHOICES, default="medium")
    tags = serializers.ListField(
        child=serializers.CharField(max_length=30, allow_blank=True),
        required=False,
        default=list,
    )

    def validate_photos(self, value):
        if len(value) > MAX_PHOTOS:
            raise serializers.ValidationError(f"At most {MAX_PHOTOS} photos are allowed")
        return value

    def validate_tags(self, value):
        # Extra tags beyond MAX_TAGS are dropped, not rejected
        return normalize_tags(value)

    def validate(self, data):
        if not validate_category_and_sub_category(data["category"], data["sub_category"]):
            raise serializers.ValidationError({
                "sub_category": "Invalid category or sub-category"
            })
        return data

    def to_model_fields(self):
        """validated_data flattened into ItemRequest columns."""
        data = dict(self.validated_data)
        location = data.pop("location")
        data["photos"] = [dict(photo) for photo in data.get("photos", [])]
        data.update(LocationSerializer().to_model_fields(location))
        return data


class ItemRequestSerializer(serializers.ModelSerializer):
    location = serializers.SerializerMethodField()
    category_display = serializers.SerializerMethodField()
    author = serializers.SerializerMethodField()
    is_expired = serializers.SerializerMethodField()
    days_left = serializers.SerializerMethodField()

    class Meta:
        model = ItemRequest
        fields = [
            "id",
            "author",
            "title",
            "description",
            "category",
            "sub_category",
            "category_display",
            "photos",
            "location",
            "radius",
            "status",
            "priority",
            "tags",
            "response_count",
            "view_count",
            "created_at",
            "updated_at",
            "expires_at",
            "is_expired",
            "days_left",
        ]

    def get_location(self, obj):
        return location_representation(obj)

    def get_category_display(self, obj):
        return get_category_display_name(obj.category, obj.sub_category)

    def get_author(self, obj):
        return {
            "id": obj.user_id,
            "first_name": obj.user.first_name,
            "avatar": obj.user.avatar,
        }

    def get_is_expired(self, obj):
        return obj.expires_at < timezone.now()

    def get_days_left(self, obj):
        seconds = (obj.expires_at - timezone.now()).total_seconds()
        return math.ceil(seconds / 86400)


class CancelRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)
