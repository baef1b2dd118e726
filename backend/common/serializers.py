from rest_framework import serializers


class LocationSerializer(serializers.Serializer):
    """
    Location as sent by the mobile app.

    ``coordinates`` is [longitude, latitude], in that order.
    """
    coordinates = serializers.ListField(
        child=serializers.FloatField(),
        min_length=2,
        max_length=2,
    )
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    postal_code = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=100, required=False, default="France")

    def validate_coordinates(self, value):
        longitude, latitude = value
        if not -180 <= longitude <= 180:
            raise serializers.ValidationError("Longitude must be between -180 and 180")
        if not -90 <= latitude <= 90:
            raise serializers.ValidationError("Latitude must be between -90 and 90")
        return value

    def to_model_fields(self, validated):
        """Flatten into the longitude/latitude/address columns models use."""
        longitude, latitude = validated["coordinates"]
        return {
            "longitude": round(longitude, 6),
            "latitude": round(latitude, 6),
            "address": validated["address"].strip(),
            "city": validated["city"].strip(),
            "postal_code": validated["postal_code"].strip(),
            "country": validated.get("country") or "France",
        }


def location_representation(instance):
    return {
        "coordinates": [float(instance.longitude), float(instance.latitude)],
        "address": instance.address,
        "city": instance.city,
        "postal_code": instance.postal_code,
        "country": instance.country,
    }
