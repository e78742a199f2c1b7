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
Tests for source loading and numeric coercion.
"""

import io
import json
import sys

import pandas as pd

from energy_charts.loader import coerce_number, coerce_numeric, fetch_rows, load, parse_raw_rows, parse_tv_rows

TV_CSV = """brand,screen_tech,screensize,energy_consumpt,star2,count
Acme,LCD (LED),55,190.5,5.5,3
Borel,OLED,55,,4,2
Cyan,LCD, 65 ,402,abc,0
Dune,OLED,55,inf,3.5,-2
"""

def test_coerce_blank_and_garbage_become_none():
    assert coerce_numeric(['', None, 'na', 'N/A', 'abc']) == [None] * 5

def test_coerce_non_finite_becomes_none():
    assert coerce_numeric(['inf', '-inf', 'nan']) == [None, None, None]

def test_coerce_numbers_and_whitespace():
    assert coerce_numeric(['12', ' 3.5 ', '-1e2']) == [12.0, 3.5, -100.0]
    assert coerce_number('0') == 0.0

def test_fetch_rows_reads_csv_as_strings():
    rows = fetch_rows(io.StringIO(TV_CSV))
    assert len(rows) == 4
    assert rows[0]['screensize'] == '55'
    assert rows[1]['energy_consumpt'] == ''

def test_fetch_rows_accepts_json_and_records():
    data = {'Year': [2019, 2020], 'Victoria': [1.5, None]}
    rows = fetch_rows(json.dumps(data))
    assert rows == [{'Year': '2019', 'Victoria': '1.5'}, {'Year': '2020', 'Victoria': ''}]
    assert fetch_rows([{'a': 'x'}]) == [{'a': 'x'}]

def test_records_with_a_missing_year_keep_integer_years():
    records = [
        {'Year': 2019, 'Queensland': 71},
        {'Year': 2020, 'Queensland': 44.5},
        {'Year': None, 'Queensland': 58},
    ]
    rows = fetch_rows(records)
    assert [row['Year'] for row in rows] == ['2019', '2020', '']
    assert [row['Queensland'] for row in rows] == ['71', '44.5', '58']

def test_dataframe_float_columns_lose_trailing_zero():
    frame = pd.DataFrame({'Year': [2019.0, float('nan'), 2021.0], 'Victoria': [1.5, 2.0, None]})
    rows = fetch_rows(frame)
    assert [row['Year'] for row in rows] == ['2019', '', '2021']
    assert [row['Victoria'] for row in rows] == ['1.5', '2', '']

def test_parse_tv_rows_keeps_row_with_one_bad_field():
    samples = parse_tv_rows(fetch_rows(io.StringIO(TV_CSV)))
    assert len(samples) == 4

    acme, borel, cyan, dune = samples
    assert acme.annual_kwh == 190.5 and acme.count == 3
    assert borel.annual_kwh is None and borel.star_rating == 4
    assert cyan.diagonal_inch == 65 and cyan.star_rating is None
    assert cyan.count == 0
    assert dune.annual_kwh is None and dune.count == 0

def test_parse_tv_rows_missing_columns():
    samples = parse_tv_rows([{'brand': 'Acme', 'screen_tech': 'OLED'}])
    assert samples[0].diagonal_inch is None
    assert samples[0].count == 0

def test_load_failure_is_silent_but_observable():
    result = load('/nonexistent/path/to/data.csv', parse_raw_rows)
    assert result.samples == []
    assert not result.ok
    assert result.error

def test_load_success():
    result = load(io.StringIO(TV_CSV), parse_tv_rows)
    assert result.ok
    assert len(result.samples) == 4

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
