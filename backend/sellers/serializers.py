from rest_framework import serializers

from accounts.serializers import UserSerializer
from common.categories import CATEGORY_CHOICES, validate_category_and_sub_category
from common.serializers import LocationSerializer, location_representation
from sellers.models import Seller, Specialty

BUSINESS_NAME_REGEX = r"^[a-zA-ZÀ-ÿ0-9\s'&.\-]+$"
PHONE_REGEX = r"^[0-9+\-\s().]+$"


class SpecialtySerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=CATEGORY_CHOICES)
    sub_categories = serializers.ListField(
        child=serializers.CharField(max_length=50),
        min_length=1,
    )

    def validate(self, data):
        for sub_category in data["sub_categories"]:
            if not validate_category_and_sub_category(data["category"], sub_category):
                raise serializers.ValidationError({
                    "sub_categories": f"Invalid category/sub-category: {data['category']} > {sub_category}"
                })
        return data


class SellerCreateSerializer(serializers.Serializer):
    """
    Input for creating a seller profile.

    At least one specialty is required, each with at least one valid
    sub-category.
    """
    business_name = serializers.RegexField(BUSINESS_NAME_REGEX, min_length=2, max_length=100)
    description = serializers.CharField(min_length=10, max_length=500)
    phone = serializers.RegexField(PHONE_REGEX, min_length=10, max_length=20)
    location = LocationSerializer()
    service_radius = serializers.IntegerField(min_value=1, max_value=100, default=10)
    specialties = SpecialtySerializer(many=True, allow_empty=False)


class SpecialtyReadSerializer(serializers.ModelSerializer):
    class Meta:
        model = Specialty
        fields = ["category", "sub_categories"]


class SellerProfileSerializer(serializers.ModelSerializer):
    """
    Full seller profile
    """
    user = UserSerializer(read_only=True)
    location = serializers.SerializerMethodField()
    specialties = SpecialtyReadSerializer(many=True, read_only=True)
    stats = serializers.SerializerMethodField()

    class Meta:
        model = Seller
        fields = [
            "id",
            "user",
            "business_name",
            "description",
            "phone",
            "location",
            "service_radius",
            "specialties",
            "status",
            "is_verified",
            "is_available",
            "stats",
            "last_active_at",
            "created_at",
        ]

    def get_location(self, obj):
        return location_representation(obj)

    def get_stats(self, obj):
        return {
            "total_requests": obj.total_requests,
            "responded_requests": obj.responded_requests,
            "successful_deals": obj.successful_deals,
            "average_response_time": obj.average_response_time,
            "rating": obj.rating,
            "review_count": obj.review_count,
            "response_rate": obj.response_rate,
        }


class RecommendedSellerSerializer(serializers.Serializer):
    """Read-only view of a ranked MatchCandidate."""
    seller_id = serializers.IntegerField()
    business_name = serializers.CharField()
    distance_km = serializers.FloatField()
    rating = serializers.FloatField()
    score = serializers.IntegerField()
