#!/usr/bin/env python3
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (C) 2024 Jonathan Lee
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License version 3
# as published by the Free Software Foundation.
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.
# See the GNU Affero General Public License for more details.
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see https://www.gnu.org/licenses/.

"""
Tests for the wide-to-tidy pivot and the weighted aggregations.
"""

import sys
from datetime import datetime

from energy_charts.config import LINE_CHART, SPOT_PRICE_ALIASES, SPOT_PRICE_ORDER
from energy_charts.records import TvSample
from energy_charts.reshape import (
    categories_of,
    display_category,
    group_series,
    order_categories,
    parse_year,
    pivot_wide,
    read_preaggregated,
    select_categories,
    sort_aggregates,
    weighted_mean,
    weighted_total,
)

SUFFIX = LINE_CHART['unit_suffix']

def tv(tech, kwh, count, brand='Acme', size=55.0, star=4.0):
    return TvSample(brand=brand, tech=tech, diagonal_inch=size, annual_kwh=kwh, star_rating=star, count=count)

def spot_rows():
    return [
        {'Year': '2019', 'Queensland ($ per megawatt hour)': '71', 'Tasmania ($ per megawatt hour)': '',
         'Average Price (notTas-Snowy)': '89'},
        {'Year': '2020', 'Queensland ($ per megawatt hour)': '44', 'Tasmania ($ per megawatt hour)': '40',
         'Average Price (notTas-Snowy)': '51'},
        {'Year': 'n/a', 'Queensland ($ per megawatt hour)': '999', 'Tasmania ($ per megawatt hour)': '999',
         'Average Price (notTas-Snowy)': '999'},
        {'Year': '2021', 'Queensland ($ per megawatt hour)': '58', 'Tasmania ($ per megawatt hour)': 'x',
         'Average Price (notTas-Snowy)': '57'},
    ]

def test_parse_year():
    assert parse_year('2020') == datetime(2020, 1, 1)
    assert parse_year(' 1999 ') == datetime(1999, 1, 1)
    assert parse_year('20.5') is None
    assert parse_year('') is None
    assert parse_year(None) is None

def test_display_category_alias_and_suffix():
    assert display_category('Queensland ($ per megawatt hour)', SPOT_PRICE_ALIASES, SUFFIX) == 'Queensland'
    assert display_category('Average Price (notTas-Snowy)', SPOT_PRICE_ALIASES, SUFFIX) == 'NEM average'
    assert display_category('Heywood ($ per megawatt hour)', SPOT_PRICE_ALIASES, SUFFIX) == 'Heywood'

def test_pivot_skips_bad_keys_and_blank_cells():
    records = pivot_wide(spot_rows(), 'Year', aliases=SPOT_PRICE_ALIASES, unit_suffix=SUFFIX)
    assert all(r.value != 999 for r in records)
    groups = group_series(records)
    assert [r.value for r in groups['Queensland']] == [71, 44, 58]
    assert [r.value for r in groups['Tasmania']] == [40]
    assert [r.x.year for r in groups['NEM average']] == [2019, 2020, 2021]

def test_category_present_iff_three_points():
    groups = group_series(pivot_wide(spot_rows(), 'Year', aliases=SPOT_PRICE_ALIASES, unit_suffix=SUFFIX))
    categories = select_categories(groups, SPOT_PRICE_ORDER)
    assert categories == ('Queensland', 'NEM average')
    for category, values in groups.items():
        assert (category in categories) == (len(values) >= 3)

def test_group_series_sorts_by_key():
    rows = [{'Year': '2021', 'A': '3'}, {'Year': '2019', 'A': '1'}, {'Year': '2020', 'A': '2'}]
    groups = group_series(pivot_wide(rows, 'Year'))
    assert [r.value for r in groups['A']] == [1, 2, 3]

def test_order_categories_preferred_then_alphabetical():
    order = order_categories(['Zeta', 'Victoria', 'Alpha', 'Queensland'], SPOT_PRICE_ORDER)
    assert order == ('Queensland', 'Victoria', 'Alpha', 'Zeta')

def test_weighted_mean():
    result = weighted_mean([tv('A', 10, 1), tv('A', 20, 3)], 'tech', 'annual_kwh', 'count')
    assert len(result) == 1
    assert result[0].value == 17.5
    assert result[0].weight == 4

def test_weighted_total():
    result = weighted_total([tv('A', 10, 1), tv('A', 20, 3)], 'tech', 'annual_kwh', 'count')
    assert result[0].value == 70

def test_zero_weight_excludes_category():
    samples = [tv('A', 10, 1), tv('B', 250, 0), tv('C', None, 5)]
    assert categories_of(weighted_mean(samples, 'tech', 'annual_kwh', 'count')) == ('A',)
    assert categories_of(weighted_total(samples, 'tech', 'annual_kwh', 'count')) == ('A',)

def test_aggregation_keeps_first_appearance_order():
    samples = [tv('OLED', 300, 1), tv('LCD', 200, 1), tv('OLED', 320, 1)]
    assert categories_of(weighted_mean(samples, 'tech', 'annual_kwh', 'count')) == ('OLED', 'LCD')
    assert weighted_mean([], 'tech', 'annual_kwh', 'count') == []

def test_sort_aggregates():
    aggs = weighted_mean([tv('X', 300, 1), tv('Y', 100, 1), tv('Z', 200, 1)], 'tech', 'annual_kwh', 'count')
    assert categories_of(sort_aggregates(aggs)) == ('Y', 'Z', 'X')
    assert categories_of(sort_aggregates(aggs, descending=True)) == ('X', 'Z', 'Y')

def test_read_preaggregated():
    rows = [
        {'Screen_Tech': 'LCD (LED)', 'Mean': '236.4'},
        {'Screen_Tech': '', 'Mean': '100'},
        {'Screen_Tech': 'OLED', 'Mean': 'na'},
    ]
    result = read_preaggregated(rows, 'Screen_Tech', 'Mean')
    assert [(a.category, a.value) for a in result] == [('LCD (LED)', 236.4)]

def main():
    """Run every test in this module and print a summary."""
    tests = [(name, fn) for name, fn in sorted(globals().items()) if name.startswith('test_') and callable(fn)]
    failed = 0
    for name, fn in tests:
        try:
            fn()
            print(f"  ✅ {name}")
        except Exception as e:
            failed += 1
            print(f"  ❌ {name}: {e}")
    print(f"\n✅ Passed: {len(tests) - failed}  ❌ Failed: {failed}")
    return failed == 0

if __name__ == "__main__":
    sys.exit(0 if main() else 1)
