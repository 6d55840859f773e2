from __future__ import annotations

import json

from django.core.management.base import BaseCommand, CommandError

from screening.management.commands.screen_partners import load_json_items
from screening.serializers import VatBatchSerializer
from screening.services import validate_vat_ids


class Command(BaseCommand):
    help = 'Validate VAT identifiers against format rules and the VIES registry.'

    def add_arguments(self, parser):
        parser.add_argument('vat_ids', nargs='*', help='Identifiers as CC:NUMBER, e.g. DE:123456789.')
        parser.add_argument('--file', type=str, default='', help='JSON file with a list of {jurisdiction, vat_number}.')
        parser.add_argument('--delay', type=float, default=None, help='Seconds to wait between registry calls.')

    def handle(self, *args, **options):
        items = [parse_vat_argument(value) for value in options['vat_ids']]
        if options['file']:
            items.extend(load_json_items(options['file'], 'vat_ids'))
        if not items:
            raise CommandError('Provide VAT IDs as arguments or with --file.')

        serializer = VatBatchSerializer(data={'vat_ids': items})
        if not serializer.is_valid():
            raise CommandError(f'Invalid VAT IDs: {json.dumps(serializer.errors)}')

        summary = validate_vat_ids(serializer.to_requests(), delay_seconds=options['delay'])
        for item in summary.items:
            if item.failed:
                self.stdout.write(self.style.ERROR(f'{item.item_key}: ERROR {item.error}'))
                continue
            result = item.result
            line = f'{item.item_key}: {item.status}'
            if result.registered_name:
                line += f' - {result.registered_name}'
            elif result.error_message:
                line += f' - {result.error_message}'
            self.stdout.write(line)

        counts = ', '.join(f'{status}={count}' for status, count in summary.per_status_counts.items())
        self.stdout.write(self.style.SUCCESS(f'Validation complete. {summary.total_items} VAT ID(s): {counts}'))


def parse_vat_argument(value: str) -> dict[str, str]:
    jurisdiction, separator, number = value.partition(':')
    if not separator or not jurisdiction.strip() or not number.strip():
        raise CommandError(f'Could not parse "{value}"; expected CC:NUMBER.')
    return {'jurisdiction': jurisdiction.strip(), 'vat_number': number.strip()}
