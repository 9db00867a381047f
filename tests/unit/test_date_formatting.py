"""
Unit tests for date_formatting.py - Brazilian display formats and relative time.
"""

from datetime import date, datetime, timedelta

import pytest

from agent.utils.date_formatting import (
    format_br_date,
    format_br_datetime,
    format_br_range,
    get_relative_time,
    to_postgres_date,
)
from agent.utils.date_parser import BRAZIL_TZ, DateRange


NOW = datetime(2025, 11, 20, 12, 0, 0, tzinfo=BRAZIL_TZ)


class TestFormatBRDate:
    """Test format_br_date() - DD/MM/YYYY."""

    def test_zero_padding(self):
        """Day and month are zero-padded."""
        assert format_br_date(datetime(2025, 1, 5, 10, 30)) == "05/01/2025"

    def test_two_digit_values(self):
        assert format_br_date(datetime(2025, 11, 15, tzinfo=BRAZIL_TZ)) == "15/11/2025"

    def test_plain_date(self):
        """datetime.date values are accepted."""
        assert format_br_date(date(2024, 2, 29)) == "29/02/2024"

    @pytest.mark.parametrize("value", [None, "", "2025-11-15", 20251115, object()])
    def test_invalid_returns_empty_string(self, value):
        """Non-date input returns ''."""
        assert format_br_date(value) == ""


class TestFormatBRDateTime:
    """Test format_br_datetime() - DD/MM/YYYY HH:mm."""

    def test_zero_padded_time(self):
        """Hours and minutes are zero-padded, 24-hour clock."""
        assert format_br_datetime(datetime(2025, 11, 5, 9, 7)) == "05/11/2025 09:07"

    def test_afternoon_is_24_hour(self):
        assert format_br_datetime(datetime(2025, 11, 5, 18, 45, 30)) == "05/11/2025 18:45"

    def test_end_of_day(self):
        """Seconds and milliseconds are dropped."""
        assert format_br_datetime(datetime(2025, 11, 30, 23, 59, 59, 999000)) == "30/11/2025 23:59"

    def test_plain_date_is_midnight(self):
        assert format_br_datetime(date(2025, 11, 5)) == "05/11/2025 00:00"

    @pytest.mark.parametrize("value", [None, "", "05/11/2025", 0])
    def test_invalid_returns_empty_string(self, value):
        assert format_br_datetime(value) == ""


class TestToPostgresDate:
    """Test to_postgres_date() - YYYY-MM-DD."""

    def test_zero_padding(self):
        assert to_postgres_date(datetime(2025, 1, 5)) == "2025-01-05"

    def test_local_midnight_stays_on_same_day(self):
        """No UTC conversion: local midnight keeps its calendar day."""
        assert to_postgres_date(datetime(2025, 11, 25, 0, 0, tzinfo=BRAZIL_TZ)) == "2025-11-25"
        assert to_postgres_date(datetime(2025, 11, 25, 23, 59, 59, 999000, tzinfo=BRAZIL_TZ)) == "2025-11-25"

    def test_plain_date(self):
        assert to_postgres_date(date(2024, 2, 29)) == "2024-02-29"

    @pytest.mark.parametrize("value", [None, "", "banana", 12.5])
    def test_invalid_returns_none(self, value):
        """Non-date input returns None."""
        assert to_postgres_date(value) is None


class TestFormatBRRange:
    """Test format_br_range()."""

    def test_range(self):
        date_range = DateRange(
            start=datetime(2025, 11, 1, tzinfo=BRAZIL_TZ),
            end=datetime(2025, 11, 30, 23, 59, 59, 999000, tzinfo=BRAZIL_TZ),
        )

        assert format_br_range(date_range) == "01/11/2025 a 30/11/2025"

    def test_invalid_returns_empty_string(self):
        assert format_br_range(None) == ""
        assert format_br_range((datetime(2025, 1, 1), datetime(2025, 1, 2))) == ""


class TestGetRelativeTime:
    """Test get_relative_time() - Portuguese relative descriptions."""

    @pytest.mark.parametrize(
        "elapsed,expected",
        [
            (timedelta(seconds=0), "agora mesmo"),
            (timedelta(seconds=45), "agora mesmo"),
            (timedelta(seconds=59), "agora mesmo"),
            (timedelta(seconds=60), "há 1 minuto"),
            (timedelta(seconds=90), "há 1 minuto"),
            (timedelta(minutes=5), "há 5 minutos"),
            (timedelta(minutes=59, seconds=59), "há 59 minutos"),
            (timedelta(hours=1), "há 1 hora"),
            (timedelta(hours=3), "há 3 horas"),
            (timedelta(hours=23, minutes=59), "há 23 horas"),
            (timedelta(days=1), "há 1 dia"),
            (timedelta(days=5), "há 5 dias"),
            (timedelta(days=7), "há 1 semana"),
            (timedelta(days=20), "há 2 semanas"),
            (timedelta(days=29), "há 4 semanas"),
            (timedelta(days=30), "há 1 mês"),
            (timedelta(days=90), "há 3 meses"),
            (timedelta(days=364), "há 12 meses"),
            (timedelta(days=365), "há 1 ano"),
            (timedelta(days=800), "há 2 anos"),
        ],
    )
    def test_buckets(self, elapsed, expected):
        """Elapsed time is floored into the coarsest fitting unit."""
        assert get_relative_time(NOW - elapsed, now=NOW) == expected

    def test_future_is_agora_mesmo(self):
        """Moments in the future are reported as 'agora mesmo'."""
        assert get_relative_time(NOW + timedelta(hours=2), now=NOW) == "agora mesmo"

    def test_naive_values(self):
        """Naive datetimes work with a naive 'now'."""
        now = datetime(2025, 11, 20, 12, 0)

        assert get_relative_time(datetime(2025, 11, 20, 9, 0), now=now) == "há 3 horas"

    def test_mixed_naive_and_aware(self):
        """A naive value compared to an aware 'now' uses wall-clock readings."""
        assert get_relative_time(datetime(2025, 11, 20, 11, 0), now=NOW) == "há 1 hora"

    def test_plain_date_taken_at_midnight(self):
        now = datetime(2025, 11, 20, 12, 0)

        assert get_relative_time(date(2025, 11, 17), now=now) == "há 3 dias"

    def test_default_now(self):
        """Without 'now', the current time is used."""
        assert get_relative_time(datetime.now() - timedelta(minutes=5, seconds=10)) == "há 5 minutos"
        assert get_relative_time(datetime.now(BRAZIL_TZ) - timedelta(days=2, hours=1)) == "há 2 dias"

    @pytest.mark.parametrize("value", [None, "", "ontem", 1700000000])
    def test_invalid_returns_empty_string(self, value):
        """Non-date input returns ''."""
        assert get_relative_time(value) == ""
