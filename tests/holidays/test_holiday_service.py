from __future__ import annotations

from datetime import date

import pytest

from src.doposcuola.doposcuola.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def test_range_creates_one_row_per_day(holiday_service, leader):
    created = holiday_service.create_range(
        actor=leader, start=date(2024, 12, 23), end=date(2024, 12, 27), reason="Vacanze di Natale"
    )

    assert created == 5
    assert holiday_service.is_holiday(date(2024, 12, 25))
    assert not holiday_service.is_holiday(date(2024, 12, 28))
    assert [h.holiday_date.day for h in holiday_service.list_all()] == [23, 24, 25, 26, 27]


def test_end_defaults_to_start(holiday_service, leader):
    assert holiday_service.create_range(actor=leader, start=date(2024, 11, 1), reason="Ognissanti") == 1


def test_end_before_start_rejected(holiday_service, leader):
    with pytest.raises(ValidationError, match="before start"):
        holiday_service.create_range(actor=leader, start=date(2024, 5, 2), end=date(2024, 5, 1), reason="x")


def test_reason_required_and_leader_only(holiday_service, leader, teacher_a):
    with pytest.raises(ValidationError):
        holiday_service.create_range(actor=leader, start=date(2024, 5, 2), reason="  ")
    with pytest.raises(AuthorizationError):
        holiday_service.create_range(actor=teacher_a, start=date(2024, 5, 2), reason="Ponte")


def test_delete(holiday_service, leader):
    holiday_service.create_range(actor=leader, start=date(2024, 4, 25), reason="Liberazione")
    holiday_id = holiday_service.list_all()[0].holiday_id

    holiday_service.delete(actor=leader, holiday_id=holiday_id)
    assert holiday_service.list_all() == []
    with pytest.raises(NotFoundError):
        holiday_service.delete(actor=leader, holiday_id=holiday_id)
