from datetime import UTC

from quotedesk.app.core.time import today, utc_now


def test_utc_now_is_timezone_aware_utc():
    value = utc_now()
    assert value.tzinfo is UTC


def test_today_matches_utc_date():
    assert today() == utc_now().date()
