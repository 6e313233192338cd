import json
from unittest import mock

import pandas as pd
import pytest

from projection.analysis import sensitivity
from projection.analysis.sensitivity import SensitivityTableBuilder
from projection.analysis.sensitivity import _parse_float_list
from projection.domain.types import Scenario


class TestSensitivityTableBuilder:
  """Tests for SensitivityTableBuilder."""

  def test_shape_and_labels(self, sample_metrics, sample_assumptions):
    builder = SensitivityTableBuilder(sample_metrics, sample_assumptions)

    df = builder.build(growth_rates=[5.0, 10.0, 15.0],
                       exit_multiples=[20.0, 25.0])

    assert isinstance(df, pd.DataFrame)
    assert df.shape == (3, 2)
    assert list(df.index) == ['5.0%', '10.0%', '15.0%']
    assert list(df.columns) == ['20.0x', '25.0x']
    assert df.index.name == 'Revenue Growth'
    assert df.columns.name == 'Exit Multiple'

  def test_matches_projection(self, sample_metrics, sample_assumptions):
    """Cell (10%, 25x) equals the base final-year target: 38.3086."""
    builder = SensitivityTableBuilder(sample_metrics, sample_assumptions)

    df = builder.build(growth_rates=[10.0], exit_multiples=[25.0])

    assert df.loc['10.0%', '25.0x'] == pytest.approx(38.3086, abs=0.001)

  def test_monotonic(self, sample_metrics, sample_assumptions):
    """Prices rise with growth and with the exit multiple."""
    builder = SensitivityTableBuilder(sample_metrics, sample_assumptions)

    df = builder.build(growth_rates=[0.0, 10.0, 20.0],
                       exit_multiples=[10.0, 20.0, 30.0])

    assert df.iloc[:, 0].is_monotonic_increasing
    assert df.iloc[0, :].is_monotonic_increasing

  def test_bull_scenario(self, sample_metrics, sample_assumptions):
    """Bull margin is 15%, so year-5 price at 0% growth and 1% dilution:

    1000 x 0.15 x 20 / (100 x 1.01^5) = 3000 / 105.101 = 28.544
    """
    builder = SensitivityTableBuilder(sample_metrics, sample_assumptions)

    df = builder.build(growth_rates=[0.0],
                       exit_multiples=[20.0],
                       scenario=Scenario.BULL)

    assert df.iloc[0, 0] == pytest.approx(28.544, abs=0.001)

  def test_empty_inputs_raise(self, sample_metrics, sample_assumptions):
    builder = SensitivityTableBuilder(sample_metrics, sample_assumptions)

    with pytest.raises(ValueError, match='growth_rates cannot be empty'):
      builder.build(growth_rates=[], exit_multiples=[20.0])
    with pytest.raises(ValueError, match='exit_multiples cannot be empty'):
      builder.build(growth_rates=[5.0], exit_multiples=[])


def test_parse_float_list():
  assert _parse_float_list('5, 10,15.5') == [5.0, 10.0, 15.5]


class TestMain:
  """Tests for the sensitivity CLI."""

  def _argv(self, tmp_path, quote_summary, *extra):
    path = tmp_path / 'TEST.json'
    path.write_text(json.dumps(quote_summary), encoding='utf-8')
    return [
        'sensitivity', '--metrics-json',
        str(path), '--growth-rates', '5,10', '--exit-multiples', '15,20',
        *extra
    ]

  def test_writes_csv(self, tmp_path, quote_summary):
    output = tmp_path / 'out' / 'grid.csv'
    argv = self._argv(tmp_path, quote_summary, '--multiple-type', 'evEbitda',
                      '--output', str(output))

    with mock.patch('sys.argv', argv):
      sensitivity.main()

    df = pd.read_csv(output, index_col=0)
    assert df.shape == (2, 2)

  def test_unknown_multiple_type_rejected(self, tmp_path, quote_summary):
    """An unknown basis is an argparse usage error, not a ValueError."""
    argv = self._argv(tmp_path, quote_summary, '--multiple-type', 'ev_ebitda')

    with mock.patch('sys.argv', argv):
      with pytest.raises(SystemExit) as exc_info:
        sensitivity.main()

    assert exc_info.value.code == 2
