from rest_framework import serializers

from item_requests.serializers import PhotoSerializer
from seller_responses.models import SellerResponse

MAX_RESPONSE_PHOTOS = 5


class ResponsePhotoSerializer(PhotoSerializer):
    is_primary = serializers.BooleanField(required=False, default=False)


class ResponseCreateSerializer(serializers.Serializer):
    """Input for POST /api/responses/."""
    request_id = serializers.IntegerField(min_value=1)
    message = serializers.CharField(min_length=1, max_length=1000)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    photos = ResponsePhotoSerializer(many=True, required=False, default=list)

    def validate_message(self, value):
        if not value.strip():
            raise serializers.ValidationError("Message cannot be blank")
        return value

    def validate_photos(self, value):
        if len(value) > MAX_RESPONSE_PHOTOS:
            raise serializers.ValidationError(f"At most {MAX_RESPONSE_PHOTOS} photos are allowed")
        return value


class FeedbackSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    rating = serializers.IntegerField(min_value=1, max_value=5, required=False, allow_null=True, default=None)


class ResponseStatusSerializer(serializers.Serializer):
    """Only the author's decisions; cancelled is set when the request closes."""
    status = serializers.ChoiceField(choices=["accepted", "declined"])
    feedback = FeedbackSerializer(required=False, allow_null=True, default=None)


class SellerResponseSerializer(serializers.ModelSerializer):
    seller = serializers.SerializerMethodField()
    request = serializers.SerializerMethodField()
    feedback = serializers.SerializerMethodField()

    class Meta:
        model = SellerResponse
        fields = [
            "id",
            "request",
            "seller",
            "message",
            "price",
            "photos",
            "status",
            "response_time",
            "is_read",
            "read_at",
            "feedback",
            "created_at",
            "updated_at",
        ]

    def get_seller(self, obj):
        return {
            "id": obj.seller_id,
            "business_name": obj.seller.business_name,
            "rating": obj.seller.rating,
            "is_available": obj.seller.is_available,
        }

    def get_request(self, obj):
        return {
            "id": obj.item_request_id,
            "title": obj.item_request.title,
            "status": obj.item_request.status,
        }

    def get_feedback(self, obj):
        if not obj.has_feedback:
            return None
        return {
            "message": obj.feedback_message,
            "rating": obj.feedback_rating,
            "created_at": obj.feedback_at,
        }
