from django.apps import AppConfig


class TaxesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'invoicing.taxes'
