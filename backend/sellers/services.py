import logging

from django.db import transaction

from common.serializers import LocationSerializer
from sellers.models import Seller, Specialty
from services.request_lifecycle.exceptions import (
    SellerProfileExistsError,
    SellerProfileNotFoundError,
)

logger = logging.getLogger(__name__)


def get_seller_profile(user) -> Seller:
    try:
        return (
            Seller.objects
            .select_related("user")
            .prefetch_related("specialties")
            .get(user=user)
        )
    except Seller.DoesNotExist:
        raise SellerProfileNotFoundError("Seller profile not found")


@transaction.atomic
def create_seller_profile(user, validated_data) -> Seller:
    """
    Create a seller profile with its specialties and upgrade the user role.

    New profiles start as pending; they are still eligible for matching.
    """
    if Seller.objects.filter(user=user).exists():
        raise SellerProfileExistsError("You already have a seller profile")

    location = LocationSerializer().to_model_fields(validated_data["location"])

    seller = Seller.objects.create(
        user=user,
        business_name=validated_data["business_name"].strip(),
        description=validated_data["description"].strip(),
        phone=validated_data["phone"].strip(),
        service_radius=validated_data.get("service_radius", 10),
        status="pending",
        **location,
    )
    Specialty.objects.bulk_create([
        Specialty(
            seller=seller,
            category=specialty["category"],
            sub_categories=list(dict.fromkeys(specialty["sub_categories"])),
        )
        for specialty in validated_data["specialties"]
    ])

    if user.role != "seller":
        user.role = "seller"
        user.save(update_fields=["role"])

    logger.info("Seller profile %s created for user %s", seller.id, user.id)
    return get_seller_profile(user)


def toggle_availability(user) -> Seller:
    seller = get_seller_profile(user)
    seller.is_available = not seller.is_available
    seller.touch_activity("is_available")
    logger.info("Seller %s availability -> %s", seller.id, seller.is_available)
    return seller
