from django.apps import AppConfig


class TelephoneNumbersConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.telephone_numbers'
    verbose_name = 'Telephone numbers'
