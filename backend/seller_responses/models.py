from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone

from item_requests.models import ItemRequest
from sellers.models import Seller

User = settings.AUTH_USER_MODEL


class SellerResponse(models.Model):
    """A seller's offer on an item request: message, price and photos"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('accepted', 'Accepted'),
        ('declined', 'Declined'),
        ('cancelled', 'Cancelled'),
    ]

    item_request = models.ForeignKey(ItemRequest, on_delete=models.CASCADE, related_name='responses')
    seller = models.ForeignKey(Seller, on_delete=models.CASCADE, related_name='responses')
    # Denormalized so the seller's user is reachable without the profile join
    seller_user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='sent_responses')

    message = models.TextField(max_length=1000)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    photos = models.JSONField(default=list, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')

    # Minutes between request creation and this response
    response_time = models.PositiveIntegerField(default=0)

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    # Author feedback given when accepting or declining
    feedback_message = models.CharField(max_length=500, blank=True)
    feedback_rating = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    feedback_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'responses'
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['item_request', 'seller'], name='unique_response_per_seller'),
        ]
        indexes = [
            models.Index(fields=['seller_user', 'status'], name='responses_seller__5d1c7e_idx'),
            models.Index(fields=['item_request', 'created_at'], name='responses_item_re_a83f20_idx'),
        ]

    def __str__(self):
        return f"Response {self.id} by seller {self.seller_id} on request {self.item_request_id}"

    @staticmethod
    def minutes_since(created_at) -> int:
        return max(0, int((timezone.now() - created_at).total_seconds() // 60))

    @property
    def has_feedback(self) -> bool:
        return bool(self.feedback_message) or self.feedback_rating is not None
