from django.db import models
from django.conf import settings
from django.contrib.auth.models import AbstractUser


class User(AbstractUser):
    """Extended user model with marketplace role"""
    ROLE_CHOICES = [
        ('user', 'Buyer'),
        ('seller', 'Seller'),
        ('admin', 'Administrator'),
    ]

    # Role & basic info
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='user')
    phone_number = models.CharField(max_length=20, blank=True)
    avatar = models.URLField(blank=True)

    class Meta:
        db_table = 'users'

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"


class DeviceToken(models.Model):
    """
    The push-channel address of a user's device.

    One row per user; it is the only place a push token is stored, seller
    lookups join against it.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='device_token'
    )
    token = models.CharField(max_length=255)

    # Device info reported by the mobile app
    platform = models.CharField(max_length=20, blank=True)
    device_model = models.CharField(max_length=100, blank=True)
    os_version = models.CharField(max_length=50, blank=True)
    app_version = models.CharField(max_length=50, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'device_tokens'

    def __str__(self):
        return f"{self.user} - {self.token[:20]}..."
