from __future__ import annotations

import json

from django.core.management.base import BaseCommand, CommandError

from screening.serializers import ScreeningBatchSerializer
from screening.services import screen_subjects


class Command(BaseCommand):
    help = 'Screen business partners listed in a JSON file.'

    def add_arguments(self, parser):
        parser.add_argument('--file', type=str, required=True, help='JSON file with a list of partners.')
        parser.add_argument('--delay', type=float, default=None, help='Seconds to wait between partners.')
        parser.add_argument('--dry-run', action='store_true', help='Print partners that would be screened.')

    def handle(self, *args, **options):
        partners = load_json_items(options['file'], 'partners')
        serializer = ScreeningBatchSerializer(data={'partners': partners})
        if not serializer.is_valid():
            raise CommandError(f'Invalid partner file: {json.dumps(serializer.errors)}')

        subjects = serializer.to_subjects()
        if options['dry_run']:
            for subject in subjects:
                self.stdout.write(f'[DRY RUN] Would screen: {subject.name} ({subject.country or "??"})')
            self.stdout.write(self.style.SUCCESS(f'Dry run complete. {len(subjects)} partner(s) matched.'))
            return

        summary = screen_subjects(subjects, delay_seconds=options['delay'])
        for item in summary.items:
            if item.failed:
                self.stdout.write(self.style.ERROR(f'{item.item_key}: ERROR {item.error}'))
                continue
            flag = ' (action required)' if item.requires_action else ''
            self.stdout.write(f'{item.item_key}: {item.status}{flag}')

        counts = ', '.join(f'{status}={count}' for status, count in summary.per_status_counts.items())
        self.stdout.write(self.style.SUCCESS(f'Screening complete. {summary.total_items} partner(s): {counts}'))


def load_json_items(path: str, key: str) -> list:
    try:
        with open(path, encoding='utf-8') as handle:
            payload = json.load(handle)
    except OSError as exc:
        raise CommandError(f'Could not read {path}: {exc}') from exc
    except ValueError as exc:
        raise CommandError(f'{path} is not valid JSON: {exc}') from exc

    if isinstance(payload, dict):
        payload = payload.get(key)
    if not isinstance(payload, list):
        raise CommandError(f'{path} must contain a list or an object with a "{key}" list.')
    return payload
