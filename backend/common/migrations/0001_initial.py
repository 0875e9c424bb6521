from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AdminActionLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('APPROVE_VERIFICATION', 'Approve Verification'), ('REJECT_VERIFICATION', 'Reject Verification'), ('RESET_VERIFICATION', 'Reset Verification'), ('BULK_VERIFICATION', 'Bulk Verification'), ('BULK_LISTING_ACTION', 'Bulk Listing Action'), ('BULK_CATEGORY_ACTION', 'Bulk Category Action')], db_index=True, max_length=30)),
                ('target_type', models.CharField(blank=True, help_text='Kind of entity affected (vendor, restaurant, listing, category)', max_length=20)),
                ('target_id', models.CharField(blank=True, help_text='Entity affected by the action; empty for bulk actions', max_length=64)),
                ('details', models.JSONField(default=dict, help_text='Additional details about the action')),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('timestamp', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('admin_user', models.ForeignKey(help_text='Admin who performed the action', on_delete=django.db.models.deletion.CASCADE, related_name='admin_actions_performed', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Admin Action Log',
                'verbose_name_plural': 'Admin Action Logs',
                'db_table': 'admin_action_log',
                'ordering': ['-timestamp'],
            },
        ),
    ]
