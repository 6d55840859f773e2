from unittest.mock import Mock, patch

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from screening.services import clear_vat_cache, close_registry_client


def vies_response(payload, status_code=200):
    response = Mock(status_code=status_code, ok=status_code < 400)
    response.json.return_value = payload
    return response


class ScreeningApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_screening_endpoint_returns_result(self):
        response = self.client.post(
            '/api/screening',
            {'name': 'BLOCKED CORPORATION', 'country': 'us', 'reference': 'BP-1001'},
            format='json',
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['overall_status'], 'FAIL')
        self.assertTrue(response.data['requires_action'])
        self.assertEqual(response.data['subject']['country'], 'US')
        self.assertEqual(response.data['checks']['SANCTIONS']['matched_entity'], 'BLOCKED CORPORATION')
        self.assertEqual(response.data['recommendations'][0]['severity'], 'CRITICAL')

    def test_clean_partner_is_auto_approved(self):
        response = self.client.post('/api/screening', {'name': 'Acme GmbH', 'country': 'DE'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['overall_status'], 'PASS')
        self.assertFalse(response.data['requires_action'])
        self.assertEqual(response.data['recommendations'], [])

    def test_blank_name_is_rejected(self):
        response = self.client.post('/api/screening', {'name': '   ', 'country': 'DE'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('name', response.data)

    def test_batch_screening_reports_counts(self):
        response = self.client.post(
            '/api/screening/batch',
            {
                'partners': [
                    {'name': 'Acme GmbH', 'country': 'DE', 'reference': 'BP-1'},
                    {'name': 'Blocked Corporation', 'country': 'US', 'reference': 'BP-2'},
                ],
            },
            format='json',
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['total_items'], 2)
        self.assertEqual(response.data['per_status_counts']['PASS'], 1)
        self.assertEqual(response.data['per_status_counts']['FAIL'], 1)
        self.assertEqual([item['item_key'] for item in response.data['results']], ['BP-1', 'BP-2'])

    @override_settings(SCREENING_BATCH_MAX_ITEMS=1)
    def test_batch_size_is_limited(self):
        response = self.client.post(
            '/api/screening/batch',
            {'partners': [{'name': 'A'}, {'name': 'B'}]},
            format='json',
        )

        self.assertEqual(response.status_code, 400)

    def test_configuration_lists_checks_and_policy(self):
        response = self.client.get('/api/screening/configuration')

        self.assertEqual(response.status_code, 200)
        self.assertIn('OFAC SDN List', response.data['enabled_lists'])
        self.assertEqual(response.data['status_precedence'], ['FAIL', 'ERROR', 'WARNING', 'PASS'])
        self.assertEqual(response.data['review_frequency_days'], {'standard': 365, 'elevated': 182})

    def test_screening_status(self):
        response = self.client.get('/api/screening/status')

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['available'])
        self.assertEqual(response.data['lists_status']['ofac'], 'ONLINE')


class VatApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        close_registry_client()
        clear_vat_cache()
        self.addCleanup(close_registry_client)

    @patch('screening.vat.registry.requests.Session.post')
    def test_well_formed_number_is_checked_with_registry(self, mock_post):
        mock_post.return_value = vies_response({'valid': True, 'name': 'ACME GMBH', 'address': 'Berlin'})

        response = self.client.post('/api/vat/validate', {'jurisdiction': 'DE', 'vat_number': '123 456 789'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['valid'])
        self.assertEqual(response.data['normalized_identifier'], '123456789')
        self.assertEqual(response.data['source'], 'REGISTRY')
        mock_post.assert_called_once()

    @patch('screening.vat.registry.requests.Session.post')
    def test_malformed_number_skips_registry(self, mock_post):
        response = self.client.post('/api/vat/validate', {'jurisdiction': 'DE', 'vat_number': 'ABC'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data['valid'])
        self.assertEqual(response.data['source'], 'FORMAT_CHECK')
        mock_post.assert_not_called()

    @patch('screening.vat.registry.requests.Session.post')
    def test_batch_validation_counts_statuses(self, mock_post):
        mock_post.side_effect = [
            vies_response({'valid': True, 'name': 'ACME GMBH'}),
            vies_response({'valid': False}),
        ]

        response = self.client.post(
            '/api/vat/validate/batch',
            {
                'vat_ids': [
                    {'jurisdiction': 'DE', 'vat_number': '123456789'},
                    {'jurisdiction': 'FR', 'vat_number': 'XX'},
                    {'jurisdiction': 'NL', 'vat_number': '123456789B01'},
                ],
            },
            format='json',
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.data['per_status_counts'],
            {'VALID': 1, 'INVALID': 1, 'FORMAT_CHECK': 1, 'ERROR': 0},
        )
        self.assertEqual([item['status'] for item in response.data['results']], ['VALID', 'FORMAT_CHECK', 'INVALID'])
        self.assertEqual(mock_post.call_count, 2)

    def test_countries_endpoint(self):
        response = self.client.get('/api/vat/countries')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data['results']), 27)

    @patch('screening.vat.registry.requests.Session.get')
    def test_registry_status(self, mock_get):
        mock_get.return_value = vies_response({'vow': {'available': False}, 'countries': []})

        response = self.client.get('/api/vat/status')

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data['available'])


class HealthApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    @patch('screening.views.check_registry_service_status', return_value={'available': True, 'message': 'ok'})
    def test_health_is_ok_when_dependencies_are_up(self, _mock_status):
        response = self.client.get('/api/health')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['status'], 'ok')

    @patch('screening.views.check_registry_service_status', return_value={'available': False, 'message': 'down'})
    def test_health_degrades_when_registry_is_down(self, _mock_status):
        response = self.client.get('/api/health')

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data['status'], 'degraded')
