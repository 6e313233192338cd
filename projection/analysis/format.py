'''Display formatting for money, percentages and multiples.'''

from typing import Optional

_SUFFIXES = ((1e12, 'T'), (1e9, 'B'), (1e6, 'M'), (1e3, 'K'))


def _compact(abs_value: float) -> str:
  for threshold, suffix in _SUFFIXES:
    if abs_value >= threshold:
      return f'{abs_value / threshold:.2f}{suffix}'
  if abs_value == int(abs_value):
    return f'{abs_value:,.0f}'
  return f'{abs_value:,.2f}'


def format_large_number(value: Optional[float]) -> str:
  '''Dollar amount with T/B/M/K suffix, e.g. -$1.50B. '-' when unknown.'''
  if value is None:
    return '-'
  formatted = f'${_compact(abs(value))}'
  return f'-{formatted}' if value < 0 else formatted


def format_compact_number(value: Optional[float]) -> str:
  '''Count without a $ prefix (shares, volume). Sign is dropped.'''
  if value is None:
    return '-'
  return _compact(abs(value))


def format_percent(value: Optional[float]) -> str:
  if value is None:
    return '-'
  return f'{value:.1f}%'


def format_signed_percent(value: Optional[float]) -> str:
  if value is None:
    return '-'
  return f'{value:+.1f}%'


def format_multiple(value: Optional[float]) -> str:
  if value is None:
    return '-'
  return f'{value:.2f}x'


def format_price(value: Optional[float]) -> str:
  if value is None:
    return '-'
  return f'${value:,.2f}'
