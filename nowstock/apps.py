"""Django app configuration for NowStock."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class NowstockConfig(AppConfig):
    """Configuration for NowStock app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "nowstock"
    verbose_name = _("Controle de Estoque RFID")
