import json
import os
import tempfile
from io import StringIO
from unittest.mock import Mock, patch

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from screening.services import clear_vat_cache, close_registry_client


class ScreenPartnersCommandTests(TestCase):
    def write_partners(self, payload):
        handle = tempfile.NamedTemporaryFile('w', suffix='.json', delete=False, encoding='utf-8')
        with handle:
            json.dump(payload, handle)
        self.addCleanup(os.remove, handle.name)
        return handle.name

    def test_screens_partners_from_file(self):
        path = self.write_partners(
            [
                {'name': 'Acme GmbH', 'country': 'DE', 'reference': 'BP-1'},
                {'name': 'Blocked Corporation', 'country': 'US', 'reference': 'BP-2'},
            ],
        )

        output = StringIO()
        call_command('screen_partners', '--file', path, '--delay', '0', stdout=output)
        rendered = output.getvalue()

        self.assertIn('BP-1: PASS', rendered)
        self.assertIn('BP-2: FAIL (action required)', rendered)
        self.assertIn('Screening complete. 2 partner(s)', rendered)

    @patch('screening.management.commands.screen_partners.screen_subjects')
    def test_dry_run_screens_nothing(self, mock_screen):
        path = self.write_partners({'partners': [{'name': 'Acme GmbH', 'country': 'DE'}]})

        output = StringIO()
        call_command('screen_partners', '--file', path, '--dry-run', stdout=output)

        self.assertIn('[DRY RUN] Would screen: Acme GmbH (DE)', output.getvalue())
        mock_screen.assert_not_called()

    def test_invalid_file_is_reported(self):
        path = self.write_partners({'unexpected': True})

        with self.assertRaises(CommandError):
            call_command('screen_partners', '--file', path, stdout=StringIO())


class ValidateVatIdsCommandTests(TestCase):
    def setUp(self):
        close_registry_client()
        clear_vat_cache()
        self.addCleanup(close_registry_client)

    @patch('screening.vat.registry.requests.Session.post')
    def test_validates_arguments(self, mock_post):
        response = Mock(status_code=200, ok=True)
        response.json.return_value = {'valid': True, 'name': 'ACME GMBH'}
        mock_post.return_value = response

        output = StringIO()
        call_command('validate_vat_ids', 'DE:123456789', 'DE:ABC', stdout=output)
        rendered = output.getvalue()

        self.assertIn('DE123456789: VALID - ACME GMBH', rendered)
        self.assertIn('DEABC: FORMAT_CHECK', rendered)
        mock_post.assert_called_once()

    def test_malformed_argument_is_rejected(self):
        with self.assertRaises(CommandError):
            call_command('validate_vat_ids', 'DE123456789', stdout=StringIO())
