from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import F
from django.utils import timezone

from common.categories import CATEGORY_CHOICES
from common.utils import distance_km

User = settings.AUTH_USER_MODEL


class Seller(models.Model):
    """Seller profile: business details, service area, availability and stats"""
    STATUS_CHOICES = [
        ('pending', 'Pending validation'),
        ('active', 'Active'),
        ('suspended', 'Suspended'),
        ('inactive', 'Inactive'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='seller_profile')

    # Business details
    business_name = models.CharField(max_length=100)
    description = models.TextField(max_length=500)
    phone = models.CharField(max_length=20)

    # Location (stored as plain columns, API exposes [longitude, latitude])
    longitude = models.DecimalField(max_digits=9, decimal_places=6)
    latitude = models.DecimalField(max_digits=9, decimal_places=6)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=100, default='France')

    # Service area in km
    service_radius = models.PositiveSmallIntegerField(
        default=10,
        validators=[MinValueValidator(1), MaxValueValidator(100)],
    )

    # Status & availability
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    is_verified = models.BooleanField(default=False)
    verified_at = models.DateTimeField(null=True, blank=True)
    is_available = models.BooleanField(default=True)

    # Statistics
    total_requests = models.PositiveIntegerField(default=0)
    responded_requests = models.PositiveIntegerField(default=0)
    successful_deals = models.PositiveIntegerField(default=0)
    average_response_time = models.PositiveIntegerField(default=0)  # minutes
    rating = models.FloatField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    review_count = models.PositiveIntegerField(default=0)

    last_active_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sellers'
        indexes = [
            models.Index(fields=['status', 'is_available'], name='sellers_status_4c1d6e_idx'),
            models.Index(fields=['latitude', 'longitude'], name='sellers_latitud_9a2f1b_idx'),
            models.Index(fields=['city', 'postal_code'], name='sellers_city_7e3b0c_idx'),
        ]

    def __str__(self):
        return f"{self.business_name} ({self.status})"

    @property
    def response_rate(self) -> int:
        """Percentage of received requests the seller answered."""
        if self.total_requests <= 0:
            return 0
        return round(self.responded_requests / self.total_requests * 100)

    def can_serve_location(self, longitude, latitude) -> bool:
        """True if the point lies within this seller's service radius."""
        distance = distance_km(self.latitude, self.longitude, latitude, longitude)
        return distance <= self.service_radius

    def has_specialty(self, category: str, sub_category: str = None) -> bool:
        for specialty in self.specialties.all():
            if specialty.category != category:
                continue
            if sub_category is None or sub_category in specialty.sub_categories:
                return True
        return False

    def touch_activity(self, *extra_fields):
        """Stamp last_active_at, saving any other changed fields alongside."""
        self.last_active_at = timezone.now()
        self.save(update_fields=["last_active_at", "updated_at", *extra_fields])

    @classmethod
    def increment_stats(cls, seller_id: int, **increments) -> int:
        """
        Atomically bump numeric stats, e.g. increment_stats(5, total_requests=1).

        Returns the number of rows updated.
        """
        updates = {field: F(field) + amount for field, amount in increments.items()}
        return cls.objects.filter(id=seller_id).update(**updates)


class Specialty(models.Model):
    """One category a seller covers, with the sub-categories inside it"""
    seller = models.ForeignKey(Seller, on_delete=models.CASCADE, related_name='specialties')
    category = models.CharField(max_length=30, choices=CATEGORY_CHOICES)
    sub_categories = models.JSONField(default=list)

    class Meta:
        db_table = 'seller_specialties'
        indexes = [
            models.Index(fields=['category'], name='seller_spec_categor_5d8a2e_idx'),
        ]

    def __str__(self):
        return f"{self.category}: {', '.join(self.sub_categories)}"
