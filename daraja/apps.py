from django.apps import AppConfig


class DarajaConfig(AppConfig):
    name = 'daraja'
    verbose_name = 'M-Pesa Daraja'
