"""
Management command to test M-Pesa STK push against the configured environment.
"""

import json
import uuid

from django.core.management.base import BaseCommand, CommandError

from daraja.client import MpesaClient
from daraja.exceptions import DarajaException
from daraja.utils.formatters import format_currency


class Command(BaseCommand):
    help = 'Test M-Pesa STK push functionality'

    def add_arguments(self, parser):
        parser.add_argument(
            '--phone',
            type=str,
            help='Customer phone number (e.g., 0712345678)'
        )
        parser.add_argument(
            '--amount',
            type=float,
            help='Payment amount'
        )
        parser.add_argument(
            '--reference',
            type=str,
            help='Account reference (auto-generated if not provided)'
        )
        parser.add_argument(
            '--description',
            type=str,
            default=None,
            help='Transaction description (max 13 characters)'
        )
        parser.add_argument(
            '--status',
            type=str,
            metavar='CHECKOUT_REQUEST_ID',
            help='Only query the status of an earlier push'
        )

    def _print_result(self, result):
        body = result.raw_body if result.ok else result.diagnostic
        try:
            body = json.dumps(json.loads(body), indent=2)
        except ValueError:
            pass

        if result.ok:
            self.stdout.write(self.style.SUCCESS(f'\nGateway accepted the request (HTTP {result.status_code}):'))
        else:
            self.stdout.write(self.style.ERROR(f'\nGateway rejected the request (HTTP {result.status_code}):'))
        self.stdout.write(body)

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS('\n=== M-Pesa STK Push Test ===\n'))

        try:
            client = MpesaClient()
        except DarajaException as e:
            raise CommandError(f'Could not build the Daraja client: {e.message}')

        with client:
            try:
                if options['status']:
                    self.stdout.write(f"Querying STK push {options['status']}...")
                    self._print_result(client.stk_push_status(options['status']))
                    return

                phone = options['phone']
                amount = options['amount']
                if not phone or amount is None:
                    raise CommandError('--phone and --amount are required to send a push.')

                reference = options.get('reference') or f"TEST{uuid.uuid4().hex[:8].upper()}"

                self.stdout.write('Sending STK push...')
                self.stdout.write(f'  Phone: {phone}')
                self.stdout.write(f'  Amount: {format_currency(amount)}')
                self.stdout.write(f'  Reference: {reference}')

                result = client.stk_push(reference, phone, amount, options['description'])
                self._print_result(result)

                if result.ok:
                    self.stdout.write(self.style.WARNING(
                        '\nNote: Customer should receive a prompt on their phone to complete payment.'
                    ))
                    checkout_id = result.json().get('CheckoutRequestID')
                    if checkout_id:
                        self.stdout.write(
                            f'\nTo check status later, run:\n'
                            f'  python manage.py test_mpesa_stk_push --status {checkout_id}'
                        )
            except DarajaException as e:
                raise CommandError(f'STK push test failed: {e.message}')
