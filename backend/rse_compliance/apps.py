"""
RSE compliance app configuration.
"""

from django.apps import AppConfig


class RseComplianceConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'rse_compliance'
    verbose_name = 'RSE Compliance'
