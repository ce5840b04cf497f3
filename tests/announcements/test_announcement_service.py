from __future__ import annotations

import pytest

from src.doposcuola.doposcuola.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def test_publish_and_latest(announcement_service, clock, leader):
    assert announcement_service.latest() is None

    announcement_service.publish(actor=leader, title="Benvenuti", content="Si parte martedì")
    clock.advance(hours=1)
    second = announcement_service.publish(actor=leader, title="Aula 3", content="Cambio aula")

    latest = announcement_service.latest()
    assert latest.announcement_id == second
    assert latest.author_name == leader.name
    assert [a.title for a in announcement_service.list_recent()] == ["Aula 3", "Benvenuti"]


def test_publish_requires_leader_and_content(announcement_service, leader, teacher_a):
    with pytest.raises(AuthorizationError):
        announcement_service.publish(actor=teacher_a, title="Hi", content="there")
    with pytest.raises(ValidationError):
        announcement_service.publish(actor=leader, title="", content="there")


def test_delete(announcement_service, leader):
    announcement_id = announcement_service.publish(actor=leader, title="Old", content="news")

    announcement_service.delete(actor=leader, announcement_id=announcement_id)
    with pytest.raises(NotFoundError):
        announcement_service.delete(actor=leader, announcement_id=announcement_id)
