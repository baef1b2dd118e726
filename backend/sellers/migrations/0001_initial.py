import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


CATEGORY_CHOICES = [
    ('electronique', 'Électronique'),
    ('mobilier', 'Mobilier'),
    ('vetements', 'Vêtements'),
    ('livres', 'Livres & Médias'),
    ('sport', 'Sport & Loisirs'),
    ('jardinage', 'Jardinage'),
    ('bricolage', 'Bricolage'),
    ('cuisine', 'Cuisine & Maison'),
    ('decoration', 'Décoration'),
    ('jouets', 'Jouets & Enfants'),
    ('vehicules', 'Véhicules'),
    ('autres', 'Autres'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Seller',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('business_name', models.CharField(max_length=100)),
                ('description', models.TextField(max_length=500)),
                ('phone', models.CharField(max_length=20)),
                ('longitude', models.DecimalField(decimal_places=6, max_digits=9)),
                ('latitude', models.DecimalField(decimal_places=6, max_digits=9)),
                ('address', models.CharField(max_length=255)),
                ('city', models.CharField(max_length=100)),
                ('postal_code', models.CharField(max_length=20)),
                ('country', models.CharField(default='France', max_length=100)),
                ('service_radius', models.PositiveSmallIntegerField(default=10, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(100)])),
                ('status', models.CharField(choices=[('pending', 'Pending validation'), ('active', 'Active'), ('suspended', 'Suspended'), ('inactive', 'Inactive')], default='pending', max_length=20)),
                ('is_verified', models.BooleanField(default=False)),
                ('verified_at', models.DateTimeField(blank=True, null=True)),
                ('is_available', models.BooleanField(default=True)),
                ('total_requests', models.PositiveIntegerField(default=0)),
                ('responded_requests', models.PositiveIntegerField(default=0)),
                ('successful_deals', models.PositiveIntegerField(default=0)),
                ('average_response_time', models.PositiveIntegerField(default=0)),
                ('rating', models.FloatField(default=0, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(5)])),
                ('review_count', models.PositiveIntegerField(default=0)),
                ('last_active_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='seller_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'sellers',
                'indexes': [
                    models.Index(fields=['status', 'is_available'], name='sellers_status_4c1d6e_idx'),
                    models.Index(fields=['latitude', 'longitude'], name='sellers_latitud_9a2f1b_idx'),
                    models.Index(fields=['city', 'postal_code'], name='sellers_city_7e3b0c_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Specialty',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category', models.CharField(choices=CATEGORY_CHOICES, max_length=30)),
                ('sub_categories', models.JSONField(default=list)),
                ('seller', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='specialties', to='sellers.seller')),
            ],
            options={
                'db_table': 'seller_specialties',
                'indexes': [
                    models.Index(fields=['category'], name='seller_spec_categor_5d8a2e_idx'),
                ],
            },
        ),
    ]
