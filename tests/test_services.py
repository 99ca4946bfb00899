"""
Tests for the submit-calculation / fetch-history operations, history
summaries, chart series and owner resolution
"""

from datetime import datetime, timedelta, timezone as dt_timezone
from types import SimpleNamespace

import numpy as np
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory, SimpleTestCase, TestCase, override_settings

from wastelog.charts import render_density_chart
from wastelog.exceptions import InvalidInput, Unauthorized
from wastelog.owners import OwnerResolver, SessionOwnerResolver, get_owner_resolver, require_owner
from wastelog.services import chart_series, fetch_history, submit_calculation, summarize_history
from wastelog.store import InMemoryWasteLogStore
from tests.fixtures.reference_data import BASE_INPUTS

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'
START = datetime(2024, 3, 1, 8, 0, 0, tzinfo=dt_timezone.utc)


def _record(density, minutes):
    return SimpleNamespace(density_bq_per_g=density, created_at=START + timedelta(minutes=minutes))


class SubmitCalculationTests(TestCase):

    def setUp(self):
        self.user = get_user_model().objects.create_user('alice', 'alice@example.com', 'pw-alice-123')
        self.store = InMemoryWasteLogStore().open()

    def tearDown(self):
        self.store.close()

    def test_submit_then_fetch(self):
        record = submit_calculation(self.store, self.user.pk, **BASE_INPUTS)
        history = fetch_history(self.store, self.user.pk)

        self.assertEqual(history[0].pk, record.pk)
        self.assertAlmostEqual(record.activity_mbq, 0.08 * 0.09 / 0.1879)

    def test_invalid_input_performs_no_write(self):
        with self.assertRaises(InvalidInput):
            submit_calculation(self.store, self.user.pk, **dict(BASE_INPUTS, mass_g=0))
        self.assertEqual(fetch_history(self.store, self.user.pk), [])

    def test_missing_owner_short_circuits_before_evaluation(self):
        """Unauthorized wins even when the inputs are also invalid"""
        with self.assertRaises(Unauthorized):
            submit_calculation(self.store, None, **dict(BASE_INPUTS, gamma_constant=0))
        with self.assertRaises(Unauthorized):
            fetch_history(self.store, None)


class SummarizeHistoryTests(SimpleTestCase):

    def test_empty_history(self):
        summary = summarize_history([])
        self.assertEqual(summary['count'], 0)
        self.assertIsNone(summary['mean_density'])
        self.assertIsNone(summary['latest_density'])

    def test_statistics(self):
        records = [_record(4.0, 3), _record(1.0, 2), _record(7.0, 1)]
        summary = summarize_history(records)

        self.assertEqual(summary['count'], 3)
        self.assertEqual(summary['latest_density'], 4.0)
        self.assertAlmostEqual(summary['mean_density'], 4.0)
        self.assertEqual(summary['min_density'], 1.0)
        self.assertEqual(summary['max_density'], 7.0)
        self.assertIsInstance(summary['mean_density'], float)
        self.assertNotIsInstance(summary['max_density'], np.floating)


@override_settings(TIME_ZONE='UTC')
class ChartSeriesTests(SimpleTestCase):

    def test_series_is_chronological_and_limited(self):
        # Newest first, as returned by the store
        records = [_record(float(i), i) for i in range(30, 0, -1)]
        series = chart_series(records, limit=20)

        self.assertEqual(len(series), 20)
        self.assertEqual([d for _, d in series], [float(i) for i in range(11, 31)])
        self.assertEqual(series[-1][0], '08:30:00')

    def test_empty_series(self):
        self.assertEqual(chart_series([]), [])

    def test_render_chart_png(self):
        png = render_density_chart([('08:00:00', 3.83), ('08:01:00', 1.0)])
        self.assertTrue(png.startswith(PNG_SIGNATURE))

    def test_render_empty_chart_png(self):
        self.assertTrue(render_density_chart([]).startswith(PNG_SIGNATURE))


class OwnerResolverTests(TestCase):

    def setUp(self):
        self.factory = RequestFactory()
        self.user = get_user_model().objects.create_user('alice', 'alice@example.com', 'pw-alice-123')

    def _request(self, user):
        request = self.factory.get('/')
        request.user = user
        return request

    def test_authenticated_user_resolves(self):
        self.assertEqual(SessionOwnerResolver().resolve_owner(self._request(self.user)), self.user.pk)
        self.assertEqual(require_owner(self._request(self.user)), self.user.pk)

    def test_anonymous_user_is_absent(self):
        request = self._request(AnonymousUser())
        self.assertIsNone(SessionOwnerResolver().resolve_owner(request))
        with self.assertRaises(Unauthorized):
            require_owner(request)

    def test_inactive_user_is_absent(self):
        self.user.is_active = False
        self.assertIsNone(SessionOwnerResolver().resolve_owner(self._request(self.user)))

    def test_custom_resolver(self):
        class FixedResolver(OwnerResolver):
            def resolve_owner(self, request):
                return 42

        self.assertEqual(require_owner(self._request(AnonymousUser()), resolver=FixedResolver()), 42)

    def test_default_resolver_from_settings(self):
        self.assertIsInstance(get_owner_resolver(), SessionOwnerResolver)


class TemplateFilterTests(SimpleTestCase):
    """Display formatting used by the dashboard"""

    def test_exponential(self):
        from wastelog.templatetags.waste_filters import exponential
        self.assertEqual(exponential(0.0383182544, 5), '3.83183e-02')
        self.assertEqual(exponential(None), '')

    def test_fixed(self):
        from wastelog.templatetags.waste_filters import fixed
        self.assertEqual(fixed(38318.2544, 2), '38318.25')

    def test_sigfigs(self):
        from wastelog.templatetags.waste_filters import sigfigs
        self.assertEqual(sigfigs(3.83182544, 5), '3.8318')
        self.assertEqual(sigfigs(2.5, 5), '2.5000')
        self.assertEqual(sigfigs(10000.0, 5), '10000')
        self.assertEqual(sigfigs('n/a'), '')

    def test_format_isotope(self):
        from wastelog.templatetags.waste_filters import format_isotope
        self.assertEqual(format_isotope('custom'), 'Custom')
        self.assertEqual(format_isotope('F-18'), 'F-18')
        self.assertEqual(format_isotope(''), '-')


class ModelValidationTests(TestCase):

    def test_clean_reports_preconditions(self):
        from django.core.exceptions import ValidationError
        from wastelog.models import WasteRecord

        user = get_user_model().objects.create_user('erin', 'erin@example.com', 'pw-erin-123')
        record = WasteRecord(owner=user, **dict(BASE_INPUTS, gamma_constant=0))
        with self.assertRaises(ValidationError) as ctx:
            record.clean()
        self.assertIn('gamma_constant', ctx.exception.message_dict)
        self.assertEqual(WasteRecord.objects.count(), 0)


class AppTestModuleTests(SimpleTestCase):

    def test_app_module_defines_no_cases(self):
        """manage.py test discovers tests/ directly, so cases must not be re-exported"""
        import inspect
        import unittest

        import wastelog.tests

        cases = [obj for _, obj in inspect.getmembers(wastelog.tests, inspect.isclass)
                 if issubclass(obj, unittest.TestCase)]
        self.assertEqual(cases, [])
