from datetime import timedelta

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import F
from django.utils import timezone

from common.categories import CATEGORY_CHOICES

MAX_TAGS = 10
DEFAULT_LIFETIME_DAYS = 30


def default_expiry():
    return timezone.now() + timedelta(days=DEFAULT_LIFETIME_DAYS)


def normalize_tags(tags):
    """Trim and lower-case tags, drop empties, keep at most MAX_TAGS."""
    cleaned = [str(tag).strip().lower() for tag in tags or []]
    return [tag for tag in cleaned if tag][:MAX_TAGS]


class ItemRequest(models.Model):
    """A buyer's posted want: what, where, and how far sellers may be"""

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
        ('expired', 'Expired'),
    ]

    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('urgent', 'Urgent'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='item_requests'
    )

    title = models.CharField(max_length=100)
    description = models.TextField(max_length=1000)

    category = models.CharField(max_length=30, choices=CATEGORY_CHOICES)
    sub_category = models.CharField(max_length=50)

    # List of {"url": ..., "alt": ...}
    photos = models.JSONField(default=list, blank=True)

    # Location
    longitude = models.DecimalField(max_digits=9, decimal_places=6)
    latitude = models.DecimalField(max_digits=9, decimal_places=6)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=100, default='France')

    # Search radius in km
    radius = models.PositiveSmallIntegerField(
        default=5,
        validators=[MinValueValidator(1), MaxValueValidator(100)],
    )

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    expires_at = models.DateTimeField(default=default_expiry)

    # Counters
    response_count = models.PositiveIntegerField(default=0)
    view_count = models.PositiveIntegerField(default=0)

    tags = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'item_requests'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['category', 'sub_category'], name='item_reques_categor_3b7e21_idx'),
            models.Index(fields=['user', 'status'], name='item_reques_user_id_8c4f02_idx'),
            models.Index(fields=['status', 'expires_at'], name='item_reques_status_1e9d5a_idx'),
        ]

    def __str__(self):
        return f"Request #{self.id} - {self.title} - {self.status}"

    def save(self, *args, **kwargs):
        self.title = (self.title or "").strip()
        self.description = (self.description or "").strip()
        self.tags = normalize_tags(self.tags)
        super().save(*args, **kwargs)

    @property
    def point(self):
        """(longitude, latitude) as floats."""
        return float(self.longitude), float(self.latitude)

    def is_active(self) -> bool:
        return self.status == 'active' and self.expires_at > timezone.now()

    def increment_view(self):
        ItemRequest.objects.filter(id=self.id).update(view_count=F('view_count') + 1)

    def increment_response(self):
        ItemRequest.objects.filter(id=self.id).update(response_count=F('response_count') + 1)

    def decrement_response(self):
        ItemRequest.objects.filter(id=self.id, response_count__gt=0).update(response_count=F('response_count') - 1)
