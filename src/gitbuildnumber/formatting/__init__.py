"""Formatting of extracted values."""

from gitbuildnumber.formatting.dates import DateFormatter, resolve_time_zone

__all__ = ["DateFormatter", "resolve_time_zone"]
