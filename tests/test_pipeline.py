# ========================
# tests/test_pipeline.py
# ========================

import unittest
import sys
import os
from unittest import mock

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.rsp_pipeline.models import PricePoint, Dataset, round_price
from src.rsp_pipeline.normalizer import (
    RowNormalizer, SkipReason, parse_dataset, parse_dataset_with_summary,
    EmptySourceError, NoValidRowsError, DatasetParseError
)
from src.rsp_pipeline.aggregation import (
    monthly_averages, summarize_series, build_chart_series, chart_title
)
from src.rsp_pipeline.fallback import FallbackGenerator, generate_fallback_dataset

HEADER = ('Country,Year,Month,Calendar Day,Products ,Metro Cities,'
          '"Retail Selling Price (Rsp) Of Petrol And Diesel (UOM:INR/L(IndianRupeesperLitre)), Scaling Factor:1"')


def make_row(date='2023-01-15', product='Petrol', city='Mumbai', price='106.31'):
    return f'India,2023,January,{date},{product},{city},{price}'


def make_csv(*rows):
    return '\n'.join([HEADER] + list(rows))


class TestRowNormalizer(unittest.TestCase):

    def setUp(self):
        self.normalizer = RowNormalizer()

    def test_valid_row(self):
        result = self.normalizer.normalize_line(make_row())
        self.assertTrue(result.ok)
        self.assertEqual(result.record, PricePoint('Mumbai', 'petrol', 2023, 1, 106.31))

    def test_product_is_case_insensitive(self):
        result = self.normalizer.normalize_line(make_row(product='DIESEL'))
        self.assertEqual(result.record.fuel_type, 'diesel')

    def test_unsupported_product_dropped(self):
        result = self.normalizer.normalize_line(make_row(product='LPG'))
        self.assertFalse(result.ok)
        self.assertEqual(result.reason, SkipReason.UNSUPPORTED_FUEL)

    def test_placeholder_price_becomes_zero(self):
        for placeholder in ('NA', 'N/A'):
            result = self.normalizer.normalize_line(make_row(price=placeholder))
            self.assertTrue(result.ok, f"Failed for price: {placeholder}")
            self.assertEqual(result.record.price, 0)

    def test_year_bounds(self):
        cases = [
            ('2016-12-31', False),
            ('2017-01-01', True),
            ('2025-12-31', True),
            ('2026-01-01', False)
        ]
        for date, kept in cases:
            result = self.normalizer.normalize_line(make_row(date=date))
            self.assertEqual(result.ok, kept, f"Failed for date: {date}")
            if not kept:
                self.assertEqual(result.reason, SkipReason.YEAR_OUT_OF_RANGE)

    def test_missing_fields_dropped(self):
        for row in (make_row(city=''), make_row(product=''), make_row(price=''), make_row(date='')):
            result = self.normalizer.normalize_line(row)
            self.assertEqual(result.reason, SkipReason.MISSING_FIELD, f"Failed for row: {row}")

    def test_too_few_fields_dropped(self):
        result = self.normalizer.normalize_line('India,2023,January,2023-01-15,Petrol,Mumbai')
        self.assertEqual(result.reason, SkipReason.TOO_FEW_FIELDS)

    def test_invalid_prices_dropped(self):
        for price in ('-1.5', 'abc', 'nan', 'inf', '1_000', '95.4abc', '1e999', '0x1A'):
            result = self.normalizer.normalize_line(make_row(price=price))
            self.assertEqual(result.reason, SkipReason.INVALID_PRICE, f"Failed for price: {price}")

    def test_decimal_price_forms(self):
        cases = [('95', 95.0), ('95.', 95.0), ('.5', 0.5), ('+95.40', 95.4), ('1.0641e2', 106.41)]
        for price, expected in cases:
            result = self.normalizer.normalize_line(make_row(price=price))
            self.assertTrue(result.ok, f"Failed for price: {price}")
            self.assertEqual(result.record.price, expected)

    def test_price_rounded_to_two_decimals(self):
        result = self.normalizer.normalize_line(make_row(price='95.416'))
        self.assertEqual(result.record.price, 95.42)

    def test_date_formats(self):
        cases = [
            ('2023-03-05', (2023, 3)),
            ('2023-03-05T10:00:00', (2023, 3)),
            ('2023-03-05T10:00:00Z', (2023, 3)),
            ('2023/03/05', (2023, 3)),
            ('05-Mar-2023', (2023, 3)),
            ('"Mar 5, 2023"', (2023, 3)),
            ('03/25/2023', (2023, 3)),
            ('25/03/2023', (2023, 3))
        ]
        for date, (year, month) in cases:
            result = self.normalizer.normalize_line(make_row(date=date))
            self.assertTrue(result.ok, f"Failed for date: {date}")
            self.assertEqual((result.record.year, result.record.month), (year, month))

    def test_invalid_date_dropped(self):
        for date in ('not-a-date', '2023-13-45', '??'):
            result = self.normalizer.normalize_line(make_row(date=date))
            self.assertEqual(result.reason, SkipReason.INVALID_DATE, f"Failed for date: {date}")


class TestParseDataset(unittest.TestCase):

    def test_header_only_is_empty_source(self):
        with self.assertRaises(EmptySourceError):
            parse_dataset(HEADER)

    def test_only_invalid_rows(self):
        with self.assertRaises(NoValidRowsError):
            parse_dataset(make_csv(make_row(product='LPG')))

    def test_errors_share_a_base_class(self):
        self.assertTrue(issubclass(EmptySourceError, DatasetParseError))
        self.assertTrue(issubclass(NoValidRowsError, DatasetParseError))
        self.assertTrue(issubclass(DatasetParseError, ValueError))

    def test_mixed_rows_summary(self):
        text = make_csv(
            make_row(),
            '',
            '   ',
            make_row(product='LPG'),
            make_row(date='2016-05-01'),
            make_row(price='NA', city='Delhi'),
            'too,short'
        )
        records, summary = parse_dataset_with_summary(text)

        self.assertEqual(len(records), 2)
        self.assertEqual(summary.valid_rows, 2)
        self.assertEqual(summary.skipped_rows, 3)
        self.assertEqual(summary.blank_lines, 2)
        self.assertEqual(summary.skip_reasons, {
            'unsupported_fuel': 1,
            'year_out_of_range': 1,
            'too_few_fields': 1
        })
        self.assertAlmostEqual(summary.skipped_rate, 0.6)

    def test_row_exception_does_not_abort_parse(self):
        original = RowNormalizer.normalize_line

        def failing_on_delhi(normalizer, line):
            if 'Delhi' in line:
                raise RuntimeError("unexpected row shape")
            return original(normalizer, line)

        text = make_csv(make_row(), make_row(city='Delhi'), make_row(city='Chennai'))
        with mock.patch.object(RowNormalizer, 'normalize_line', failing_on_delhi):
            records, summary = parse_dataset_with_summary(text)

        self.assertEqual([r.city for r in records], ['Mumbai', 'Chennai'])
        self.assertEqual(summary.skipped_rows, 1)
        self.assertEqual(summary.skip_reasons, {'row_error': 1})

    def test_windows_line_endings(self):
        text = make_csv(make_row(), make_row(city='Delhi')).replace('\n', '\r\n')
        records = parse_dataset(text)
        self.assertEqual([r.city for r in records], ['Mumbai', 'Delhi'])

    def test_header_is_never_parsed(self):
        """A data-shaped first line is still treated as the header."""
        text = '\n'.join([make_row(city='Chennai'), make_row(city='Kolkata')])
        records = parse_dataset(text)
        self.assertEqual([r.city for r in records], ['Kolkata'])


class TestMonthlyAverages(unittest.TestCase):

    def setUp(self):
        self.dataset = Dataset(records=(
            PricePoint('Mumbai', 'petrol', 2023, 1, 100.0),
            PricePoint('Mumbai', 'petrol', 2023, 1, 102.0),
        ))

    def test_two_january_records(self):
        series = monthly_averages(self.dataset, 'Mumbai', 'petrol', 2023)
        self.assertEqual(series, [101.0] + [0.0] * 11)

    def test_other_months_and_selections(self):
        dataset = Dataset(records=self.dataset.records + (
            PricePoint('Mumbai', 'petrol', 2023, 12, 99.5),
            PricePoint('Mumbai', 'petrol', 2023, 12, 100.5),
            PricePoint('Mumbai', 'diesel', 2023, 1, 90.0),
            PricePoint('Delhi', 'petrol', 2023, 1, 95.0),
            PricePoint('Mumbai', 'petrol', 2022, 1, 97.0),
        ))
        series = monthly_averages(dataset, 'Mumbai', 'petrol', 2023)
        self.assertEqual(series[0], 101.0)
        self.assertEqual(series[11], 100.0)
        self.assertEqual(series[1:11], [0.0] * 10)

    def test_city_match_is_exact(self):
        self.assertEqual(monthly_averages(self.dataset, 'mumbai', 'petrol', 2023), [0.0] * 12)

    def test_invalid_inputs_return_zeros(self):
        cases = [
            ('', 'petrol', 2023),
            (None, 'petrol', 2023),
            ('Mumbai', 'lpg', 2023),
            ('Mumbai', 'petrol', 2016),
            ('Mumbai', 'petrol', 2026),
            ('Mumbai', 'petrol', '2023'),
            ('Mumbai', 'petrol', True),
            ('Mumbai', 'petrol', 2023.5),
            ('Mumbai', 'petrol', float('nan')),
        ]
        for city, fuel_type, year in cases:
            series = monthly_averages(self.dataset, city, fuel_type, year)
            self.assertEqual(series, [0.0] * 12, f"Failed for: {(city, fuel_type, year)}")

    def test_integral_float_year(self):
        expected = monthly_averages(self.dataset, 'Mumbai', 'petrol', 2023)
        self.assertEqual(expected[0], 101.0)
        self.assertEqual(monthly_averages(self.dataset, 'Mumbai', 'petrol', 2023.0), expected)

        chart = build_chart_series(self.dataset, 'Mumbai', 'petrol', 2023.0)
        self.assertEqual(chart.year, 2023)
        self.assertEqual(chart.title, 'Monthly Average RSP - Mumbai (Petrol, 2023)')

    def test_no_matching_records(self):
        self.assertEqual(monthly_averages(self.dataset, 'Delhi', 'diesel', 2024), [0.0] * 12)

    def test_bad_dataset_does_not_raise(self):
        self.assertEqual(monthly_averages(None, 'Mumbai', 'petrol', 2023), [0.0] * 12)

    def test_plain_list_dataset(self):
        series = monthly_averages(list(self.dataset), 'Mumbai', 'petrol', 2023)
        self.assertEqual(series[0], 101.0)

    def test_idempotent(self):
        first = monthly_averages(self.dataset, 'Mumbai', 'petrol', 2023)
        second = monthly_averages(self.dataset, 'Mumbai', 'petrol', 2023)
        self.assertEqual(first, second)
        self.assertIsNot(first, second)


class TestSeriesPresentation(unittest.TestCase):

    def test_statistics_ignore_empty_months(self):
        series = [100.0, 0.0, 110.0, 0.0, 105.0] + [0.0] * 7
        statistics = summarize_series(series)
        self.assertEqual(statistics.average, 105.0)
        self.assertEqual(statistics.maximum, 110.0)
        self.assertEqual(statistics.minimum, 100.0)
        self.assertEqual(statistics.price_range, 10.0)
        self.assertEqual(statistics.months_with_data, 3)

    def test_statistics_for_empty_series(self):
        self.assertIsNone(summarize_series([0.0] * 12))

    def test_chart_title(self):
        self.assertEqual(chart_title('Mumbai', 'petrol', 2023),
                         'Monthly Average RSP - Mumbai (Petrol, 2023)')

    def test_chart_series(self):
        dataset = Dataset(records=(PricePoint('Delhi', 'diesel', 2020, 6, 80.5),))
        chart = build_chart_series(dataset, 'Delhi', 'diesel', 2020)
        self.assertTrue(chart.has_data)
        self.assertEqual(chart.labels[5], 'Jun')
        self.assertEqual(chart.values[5], 80.5)
        payload = chart.to_dict()
        self.assertEqual(payload['statistics']['average'], 80.5)

        empty = build_chart_series(dataset, 'Delhi', 'petrol', 2020)
        self.assertFalse(empty.has_data)
        self.assertIsNone(empty.to_dict()['statistics'])

    def test_round_price_is_half_up(self):
        self.assertEqual(round_price(0.125), 0.13)
        self.assertEqual(round_price(101.0), 101.0)


class TestFallbackGenerator(unittest.TestCase):

    def test_shape(self):
        records = generate_fallback_dataset()
        self.assertEqual(len(records), 4 * 2 * 9 * 12)
        keys = {(r.city, r.fuel_type, r.year, r.month) for r in records}
        self.assertEqual(len(keys), len(records))

    def test_every_record_is_valid(self):
        for record in generate_fallback_dataset():
            self.assertIn(record.fuel_type, ('petrol', 'diesel'))
            self.assertTrue(2017 <= record.year <= 2025)
            self.assertTrue(1 <= record.month <= 12)
            self.assertGreaterEqual(record.price, 0)
            self.assertEqual(record.price, round(record.price, 2))

    def test_seed_pins_the_perturbation(self):
        first = FallbackGenerator(seed=7).generate()
        second = FallbackGenerator(seed=7).generate()
        self.assertEqual(first, second)

    def test_value_within_noise_band(self):
        generator = FallbackGenerator(seed=1)
        # Mumbai petrol 2021 January: 80 * 1.2 * 1.0 - 5 = 91, noise within +/- 5
        price = generator.price_for('Mumbai', 'petrol', 2021, 1)
        self.assertTrue(86.0 <= price <= 96.0)

    def test_custom_coverage(self):
        generator = FallbackGenerator(seed=3, cities=('Delhi',), years=(2020, 2021))
        records = generator.generate()
        self.assertEqual(generator.expected_size, 2 * 2 * 12)
        self.assertEqual(len(records), generator.expected_size)
        self.assertEqual({r.city for r in records}, {'Delhi'})

    def test_unknown_city_multiplier(self):
        self.assertEqual(FallbackGenerator().city_multiplier('Atlantis'), 1.0)

    def test_fallback_supports_queries(self):
        dataset = Dataset(records=tuple(generate_fallback_dataset()))
        series = monthly_averages(dataset, 'Chennai', 'diesel', 2019)
        self.assertTrue(all(value > 0 for value in series))


if __name__ == '__main__':
    unittest.main()
