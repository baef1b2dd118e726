"""Shared fixtures for the services tests."""

from datetime import timedelta
from math import asin, cos, degrees, radians, sin

from django.utils import timezone

from accounts.models import DeviceToken, User
from common.utils import EARTH_RADIUS_KM, KM_PER_DEGREE
from item_requests.models import ItemRequest
from sellers.models import Seller, Specialty

REQUEST_LON = 2.35
REQUEST_LAT = 48.85


def lat_north_of_request(km):
	return round(REQUEST_LAT + km / KM_PER_DEGREE, 6)


def lon_east_of_request(km):
	half_angle = km / EARTH_RADIUS_KM / 2
	delta = 2 * asin(sin(half_angle) / cos(radians(REQUEST_LAT)))
	return round(REQUEST_LON + degrees(delta), 6)


def make_user(username, role="user", first_name=""):
	return User.objects.create_user(
		username=username,
		password="pass1234",
		email=f"{username}@example.com",
		first_name=first_name or username.title(),
		role=role,
	)


def make_seller(username, km=3.0, status="active", is_available=True,
				specialties=(("electronique", ["smartphones"]),), rating=4.5,
				total_requests=10, responded_requests=8, days_inactive=1,
				push_token=None, longitude=REQUEST_LON, latitude=None):
	user = make_user(username, role="seller")
	seller = Seller.objects.create(
		user=user,
		business_name=f"{username} shop",
		description="Second-hand electronics and repairs",
		phone="0102030405",
		longitude=longitude,
		latitude=latitude if latitude is not None else lat_north_of_request(km),
		address="1 rue de Rivoli",
		city="Paris",
		postal_code="75001",
		service_radius=20,
		status=status,
		is_available=is_available,
		rating=rating,
		total_requests=total_requests,
		responded_requests=responded_requests,
		last_active_at=timezone.now() - timedelta(days=days_inactive),
	)
	for category, sub_categories in specialties:
		Specialty.objects.create(seller=seller, category=category, sub_categories=list(sub_categories))
	if push_token:
		DeviceToken.objects.create(user=user, token=push_token, platform="ios")
	return seller


def make_item_request(author, radius=10, category="electronique", sub_category="smartphones", **extra):
	fields = dict(
		user=author,
		title="Looking for an iPhone 13",
		description="Good condition, 128GB, any colour is fine.",
		category=category,
		sub_category=sub_category,
		longitude=REQUEST_LON,
		latitude=REQUEST_LAT,
		address="10 place de la Concorde",
		city="Paris",
		postal_code="75008",
		radius=radius,
	)
	fields.update(extra)
	return ItemRequest.objects.create(**fields)
