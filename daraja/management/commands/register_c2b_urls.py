"""
Management command to register the C2B validation and confirmation URLs.
"""

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from daraja.client import MpesaClient
from daraja.exceptions import DarajaException


class Command(BaseCommand):
    help = 'Register C2B validation and confirmation URLs with Daraja'

    def add_arguments(self, parser):
        parser.add_argument(
            '--response-type',
            type=str,
            default='Completed',
            choices=['Completed', 'Cancelled'],
            help='What the gateway does when the validation URL is unreachable (default: Completed)'
        )

    def handle(self, *args, **options):
        self.stdout.write('Registering C2B URLs...')

        required = {
            'MPESA_SHORTCODE': 'Shortcode',
            'MPESA_STK_CONFIRMATION_URL': 'STK Confirmation URL',
            'MPESA_STK_VALIDATION_URL': 'STK Validation URL',
        }
        for setting_name, label in required.items():
            if not getattr(settings, setting_name, ''):
                raise CommandError(f'{label} is not set ({setting_name}).')

        try:
            with MpesaClient() as client:
                result = client.c2b_register_url(response_type=options['response_type'])
        except DarajaException as e:
            raise CommandError(f'C2B URL registration failed: {e.message}')

        try:
            body = result.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if result.ok and str(body.get('ResponseCode')) == '0':
            self.stdout.write(self.style.SUCCESS('C2B URLs registered successfully.'))
            return

        message = body.get('errorMessage') or body.get('ResponseDescription')
        if not message:
            message = result.raw_body if result.ok else result.diagnostic
        raise CommandError(f'Failed to register C2B URLs: {message}')
