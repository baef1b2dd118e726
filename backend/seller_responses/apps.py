"""Seller responses app configuration."""

from django.apps import AppConfig


class SellerResponsesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'seller_responses'
