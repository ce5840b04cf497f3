from datetime import date

import pytest

from src.doposcuola.doposcuola.common.datetime_utils import age_on, iter_days, parse_iso_date, parse_month, week_day
from src.doposcuola.doposcuola.common.validators import normalize_subject_id, require_email
from src.doposcuola.doposcuola.core.exceptions import ValidationError


def test_week_day_counts_from_sunday():
    assert week_day(date(2024, 6, 2)) == 0
    assert week_day(date(2024, 6, 4)) == 2
    assert week_day(date(2024, 6, 8)) == 6


def test_age_on_birthday_boundary():
    assert age_on(date(2008, 6, 4), date(2024, 6, 3)) == 15
    assert age_on(date(2008, 6, 4), date(2024, 6, 4)) == 16


def test_iter_days_is_inclusive():
    assert len(list(iter_days(date(2024, 2, 28), date(2024, 3, 1)))) == 3


def test_parsers_raise_validation_errors():
    assert parse_iso_date(" 2024-06-04 ") == date(2024, 6, 4)
    assert parse_month("2024-06") == (2024, 6)
    with pytest.raises(ValidationError):
        parse_iso_date("2024-13-01")
    with pytest.raises(ValidationError):
        parse_month("")


def test_email_and_subject_id():
    assert require_email("  Mario@Example.IT ") == "mario@example.it"
    with pytest.raises(ValidationError):
        require_email("mario@")
    assert normalize_subject_id("Lingua Inglese") == "lingua_inglese"
