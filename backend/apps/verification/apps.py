"""
Verification app configuration.
Vendor and restaurant approval queue, selection and bulk actions.
"""
from django.apps import AppConfig


class VerificationConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.verification'
    verbose_name = 'Business Verification'
