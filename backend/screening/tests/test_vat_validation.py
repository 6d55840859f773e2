from unittest.mock import Mock, patch

from django.core.cache import caches
from django.test import SimpleTestCase

from screening.models import ErrorCode, VatSource
from screening.risk_engine.types import VatValidationResult
from screening.vat.validation import VatValidator, vat_status


def registry_result(valid=True, source=VatSource.REGISTRY, **overrides):
    values = {
        'valid': valid,
        'jurisdiction': 'DE',
        'normalized_identifier': '123456789',
        'source': source,
        'registered_name': 'ACME GMBH' if valid else None,
    }
    values.update(overrides)
    return VatValidationResult(**values)


class VatValidatorTests(SimpleTestCase):
    def setUp(self):
        caches['vies'].clear()
        self.client = Mock()
        self.validator = VatValidator(client=self.client, cache_ttl_seconds=60, cache_alias='vies')

    def test_bad_format_never_reaches_registry(self):
        result = self.validator.validate('DE', 'ABC')

        self.assertFalse(result.valid)
        self.assertEqual(result.source, VatSource.FORMAT_CHECK)
        self.assertEqual(result.error_code, ErrorCode.FORMAT_CHECK)
        self.assertIn('^[0-9]{9}$', result.error_message)
        self.client.validate.assert_not_called()

    def test_unsupported_jurisdiction_is_rejected_at_format_stage(self):
        result = self.validator.validate('US', '123456789')

        self.assertEqual(result.source, VatSource.FORMAT_CHECK)
        self.assertEqual(result.error_message, 'No validation pattern available for country code: US')
        self.client.validate.assert_not_called()

    def test_well_formed_identifier_goes_to_registry_normalized(self):
        self.client.validate.return_value = registry_result()

        result = self.validator.validate('de', '123 456 789', timeout=3)

        self.assertTrue(result.valid)
        self.client.validate.assert_called_once_with('DE', '123456789', timeout=3)

    def test_registry_answers_are_cached(self):
        self.client.validate.return_value = registry_result()

        first = self.validator.validate('DE', '123456789')
        second = self.validator.validate('DE', '123-456-789')

        self.assertFalse(first.from_cache)
        self.assertTrue(second.from_cache)
        self.assertEqual(second.registered_name, 'ACME GMBH')
        self.assertEqual(self.client.validate.call_count, 1)

    def test_registry_errors_are_not_cached(self):
        self.client.validate.return_value = registry_result(
            valid=False,
            source=VatSource.ERROR,
            error_code=ErrorCode.TIMEOUT,
            error_message='Request timeout - please try again later',
        )

        self.validator.validate('DE', '123456789')
        self.validator.validate('DE', '123456789')

        self.assertEqual(self.client.validate.call_count, 2)

    def test_cache_can_be_disabled(self):
        validator = VatValidator(client=self.client, cache_ttl_seconds=0, cache_alias='vies')
        self.client.validate.return_value = registry_result()

        validator.validate('DE', '123456789')
        validator.validate('DE', '123456789')

        self.assertEqual(self.client.validate.call_count, 2)


class VatStatusTests(SimpleTestCase):
    def test_status_labels(self):
        self.assertEqual(vat_status(registry_result()), 'VALID')
        self.assertEqual(vat_status(registry_result(valid=False)), 'INVALID')
        self.assertEqual(vat_status(registry_result(valid=False, source=VatSource.FORMAT_CHECK)), 'FORMAT_CHECK')
        self.assertEqual(vat_status(registry_result(valid=False, source=VatSource.ERROR)), 'ERROR')


class VatCacheOutageTests(SimpleTestCase):
    def setUp(self):
        self.client = Mock()
        self.client.validate.return_value = registry_result()
        self.validator = VatValidator(client=self.client, cache_ttl_seconds=60, cache_alias='vies')

    @patch('screening.vat.validation.caches')
    def test_unavailable_cache_falls_through_to_registry(self, mock_caches):
        mock_caches.__getitem__.return_value.get.side_effect = ConnectionError('cache down')
        mock_caches.__getitem__.return_value.set.side_effect = ConnectionError('cache down')

        with self.assertLogs('screening.vat.validation', level='ERROR'):
            result = self.validator.validate('DE', '123456789')

        self.assertTrue(result.valid)
        self.assertFalse(result.from_cache)
        self.client.validate.assert_called_once_with('DE', '123456789', timeout=None)
