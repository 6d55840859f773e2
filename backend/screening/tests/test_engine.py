import threading
from unittest.mock import patch

from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, override_settings

from screening.models import CheckKind, CheckStatus, ErrorCode, RecommendationSeverity
from screening.risk_engine.checks import DEFAULT_CHECKS
from screening.risk_engine.checks.base import BaseScreeningCheck
from screening.risk_engine.checks.sanctions import SanctionsCheck
from screening.risk_engine.data_sources import ScreeningDataError
from screening.risk_engine.engine import ScreeningEngine
from screening.risk_engine.types import Subject


class BrokenCheck(BaseScreeningCheck):
    kind = CheckKind.PEP
    source_label = 'PEPs Check'

    def evaluate(self, subject, context):
        raise RuntimeError('upstream exploded')


class ScreeningEngineTests(SimpleTestCase):
    def test_sanctioned_subject_fails_with_one_critical_recommendation(self):
        result = ScreeningEngine().run(Subject(name='BLOCKED CORPORATION', country='US'))

        sanctions = result.checks[CheckKind.SANCTIONS]
        self.assertEqual(result.overall_status, CheckStatus.FAIL)
        self.assertTrue(sanctions.evidence['sub_checks']['ofac']['has_match'])
        critical = [item for item in result.recommendations if item.severity == RecommendationSeverity.CRITICAL]
        self.assertEqual(len(critical), 1)
        self.assertEqual((result.next_review_date - result.screening_timestamp).days, 182)

    def test_clean_subject_passes_without_recommendations(self):
        result = ScreeningEngine().run(Subject(name='Acme GmbH', country='DE'))

        self.assertEqual(result.overall_status, CheckStatus.PASS)
        self.assertEqual(set(result.checks), {str(kind) for kind in CheckKind})
        self.assertTrue(all(check.status == CheckStatus.PASS for check in result.checks.values()))
        self.assertEqual(result.recommendations, [])
        self.assertEqual((result.next_review_date - result.screening_timestamp).days, 365)
        self.assertTrue(result.screening_id.startswith('SCR-'))

    def test_screening_ids_are_unique(self):
        engine = ScreeningEngine()
        subject = Subject(name='Acme GmbH', country='DE')
        self.assertNotEqual(engine.run(subject).screening_id, engine.run(subject).screening_id)

    def test_failing_check_is_isolated_as_error(self):
        engine = ScreeningEngine(check_classes=[SanctionsCheck, BrokenCheck])

        result = engine.run(Subject(name='Acme GmbH', country='DE'))

        self.assertEqual(result.checks[CheckKind.SANCTIONS].status, CheckStatus.PASS)
        self.assertEqual(result.checks[CheckKind.PEP].status, CheckStatus.ERROR)
        self.assertIn('upstream exploded', result.checks[CheckKind.PEP].details)
        self.assertEqual(result.overall_status, CheckStatus.ERROR)

    def test_sanctions_fail_outranks_check_error(self):
        engine = ScreeningEngine(check_classes=[SanctionsCheck, BrokenCheck])

        result = engine.run(Subject(name='Blocked Corporation'))

        self.assertEqual(result.overall_status, CheckStatus.FAIL)

    def test_missing_data_turns_every_check_into_error(self):
        with patch(
            'screening.risk_engine.engine.get_screening_data',
            side_effect=ScreeningDataError('feed offline'),
        ):
            result = ScreeningEngine().run(Subject(name='Acme GmbH', country='DE'))

        self.assertEqual(result.overall_status, CheckStatus.ERROR)
        self.assertEqual(len(result.checks), len(DEFAULT_CHECKS))
        self.assertTrue(all(check.status == CheckStatus.ERROR for check in result.checks.values()))

    def test_parallel_run_matches_sequential_run(self):
        subject = Subject(name='Ministry of Defense Supplies', country='IR')

        sequential = ScreeningEngine(parallel=False).run(subject)
        parallel = ScreeningEngine(parallel=True).run(subject, timeout=5)

        self.assertEqual(
            {kind: check.status for kind, check in sequential.checks.items()},
            {kind: check.status for kind, check in parallel.checks.items()},
        )
        self.assertEqual(sequential.overall_status, parallel.overall_status)

    def test_slow_check_times_out(self):
        release = threading.Event()

        class SlowCheck(BaseScreeningCheck):
            kind = CheckKind.ADVERSE_MEDIA
            source_label = 'Adverse Media'

            def evaluate(self, subject, context):
                release.wait(5)
                return self.output(status=CheckStatus.PASS, has_match=False, details='late')

        engine = ScreeningEngine(check_classes=[SanctionsCheck, SlowCheck], parallel=True)
        try:
            result = engine.run(Subject(name='Acme GmbH'), timeout=0.05)
        finally:
            release.set()

        slow = result.checks[CheckKind.ADVERSE_MEDIA]
        self.assertEqual(slow.status, CheckStatus.ERROR)
        self.assertEqual(slow.evidence['error_code'], ErrorCode.TIMEOUT)
        self.assertIn('timeout', slow.details)
        self.assertEqual(result.checks[CheckKind.SANCTIONS].status, CheckStatus.PASS)
        self.assertEqual(result.overall_status, CheckStatus.ERROR)

    def test_empty_check_list_is_a_configuration_error(self):
        with self.assertRaises(ImproperlyConfigured):
            ScreeningEngine(check_classes=[]).run(Subject(name='Acme GmbH'))

    @override_settings(SCREENING_ENABLED_CHECKS=['SANCTIONS', 'COUNTRY_RISK'])
    def test_enabled_checks_come_from_settings(self):
        result = ScreeningEngine().run(Subject(name='Acme GmbH', country='DE'))

        self.assertEqual(list(result.checks), ['SANCTIONS', 'COUNTRY_RISK'])
