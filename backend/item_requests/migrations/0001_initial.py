import django.core.validators
import django.db.models.deletion
import item_requests.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ItemRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=100)),
                ('description', models.TextField(max_length=1000)),
                ('category', models.CharField(choices=[('electronique', 'Électronique'), ('mobilier', 'Mobilier'), ('vetements', 'Vêtements'), ('livres', 'Livres & Médias'), ('sport', 'Sport & Loisirs'), ('jardinage', 'Jardinage'), ('bricolage', 'Bricolage'), ('cuisine', 'Cuisine & Maison'), ('decoration', 'Décoration'), ('jouets', 'Jouets & Enfants'), ('vehicules', 'Véhicules'), ('autres', 'Autres')], max_length=30)),
                ('sub_category', models.CharField(max_length=50)),
                ('photos', models.JSONField(blank=True, default=list)),
                ('longitude', models.DecimalField(decimal_places=6, max_digits=9)),
                ('latitude', models.DecimalField(decimal_places=6, max_digits=9)),
                ('address', models.CharField(max_length=255)),
                ('city', models.CharField(max_length=100)),
                ('postal_code', models.CharField(max_length=20)),
                ('country', models.CharField(default='France', max_length=100)),
                ('radius', models.PositiveSmallIntegerField(default=5, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(100)])),
                ('status', models.CharField(choices=[('active', 'Active'), ('completed', 'Completed'), ('cancelled', 'Cancelled'), ('expired', 'Expired')], default='active', max_length=20)),
                ('priority', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('urgent', 'Urgent')], default='medium', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('expires_at', models.DateTimeField(default=item_requests.models.default_expiry)),
                ('response_count', models.PositiveIntegerField(default=0)),
                ('view_count', models.PositiveIntegerField(default=0)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='item_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'item_requests',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['category', 'sub_category'], name='item_reques_categor_3b7e21_idx'),
                    models.Index(fields=['user', 'status'], name='item_reques_user_id_8c4f02_idx'),
                    models.Index(fields=['status', 'expires_at'], name='item_reques_status_1e9d5a_idx'),
                ],
            },
        ),
    ]
