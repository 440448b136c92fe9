from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('message', models.TextField()),
                ('kind', models.CharField(choices=[('info', 'Info'), ('warning', 'Warning'), ('urgent', 'Urgent'), ('success', 'Success'), ('error', 'Error')], default='info', max_length=10)),
                ('read', models.BooleanField(db_index=True, default=False)),
                ('link', models.CharField(blank=True, help_text='Deep-link path, e.g. /deadlines?id=42', max_length=255)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'notification',
                'verbose_name_plural': 'notifications',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['owner', '-created_at'], name='notif_owner_created_idx'),
                    models.Index(fields=['owner', 'link', 'created_at'], name='notif_owner_link_idx'),
                    models.Index(fields=['owner', 'read'], name='notif_owner_read_idx'),
                ],
            },
        ),
    ]
