from django.test import SimpleTestCase

from screening.vat.formats import (
    VAT_PATTERNS,
    expected_format,
    normalize_identifier,
    normalize_jurisdiction,
    supported_jurisdictions,
    validate_format,
)


class NormalizationTests(SimpleTestCase):
    def test_separators_are_removed_and_letters_uppercased(self):
        self.assertEqual(normalize_identifier(' 123 456-789. '), '123456789')
        self.assertEqual(normalize_identifier('nl 123.456.789 b01'), 'NL123456789B01')

    def test_greece_uses_vies_prefix(self):
        self.assertEqual(normalize_jurisdiction(' gr '), 'EL')
        self.assertEqual(normalize_jurisdiction('de'), 'DE')


class FormatValidationTests(SimpleTestCase):
    def test_valid_identifiers(self):
        samples = {
            'AT': 'U12345678',
            'BE': '0123456789',
            'DE': '123 456 789',
            'ES': 'X1234567Z',
            'FR': 'AB 123456789',
            'IE': '1234567T',
            'LT': '123456789012',
            'NL': '123456789B01',
            'RO': '12',
            'SE': '123456789012',
        }
        for jurisdiction, identifier in samples.items():
            with self.subTest(jurisdiction=jurisdiction):
                self.assertTrue(validate_format(jurisdiction, identifier))

    def test_invalid_identifiers(self):
        samples = [
            ('DE', 'ABC'),
            ('DE', '12345678'),
            ('DE', '1234567890'),
            ('AT', '12345678'),
            ('NL', '123456789C01'),
            ('LT', '1234567890'),
        ]
        for jurisdiction, identifier in samples:
            with self.subTest(jurisdiction=jurisdiction, identifier=identifier):
                self.assertFalse(validate_format(jurisdiction, identifier))

    def test_unknown_jurisdiction_is_never_valid(self):
        self.assertFalse(validate_format('US', '123456789'))
        self.assertFalse(validate_format('', '123456789'))

    def test_validation_is_idempotent(self):
        first = validate_format('DE', '123456789')
        self.assertEqual(first, validate_format('DE', '123456789'))

    def test_pattern_is_anchored(self):
        self.assertFalse(validate_format('DE', '1234567890123'))
        self.assertEqual(expected_format('DE'), '^[0-9]{9}$')
        self.assertIsNone(expected_format('US'))


class SupportedJurisdictionsTests(SimpleTestCase):
    def test_lists_every_member_state_once(self):
        jurisdictions = supported_jurisdictions()
        codes = [item['code'] for item in jurisdictions]

        self.assertEqual(len(codes), 27)
        self.assertEqual(set(codes), set(VAT_PATTERNS))
        self.assertIn({'code': 'DE', 'name': 'Germany', 'pattern': '^[0-9]{9}$'}, jurisdictions)
