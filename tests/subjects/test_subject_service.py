from __future__ import annotations

import pytest

from src.doposcuola.doposcuola.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def test_save_normalises_id_and_fills_languages(subject_service, admin):
    subject = subject_service.save(
        actor=admin,
        subject_id="Storia Dell Arte",
        translations={"it": "Storia dell'arte", "en": "Art History"},
    )

    assert subject.subject_id == "storia_dell_arte"
    assert subject.translations["en"] == "Art History"
    assert subject.translations["de"] == "Storia dell'arte"
    assert set(subject.translations) == {"it", "es", "en", "fr", "de"}
    assert subject_service.get("storia_dell_arte") == subject


def test_italian_name_is_required(subject_service, admin):
    with pytest.raises(ValidationError, match="Italian"):
        subject_service.save(actor=admin, subject_id="geo", translations={"en": "Geography"})


def test_list_active_hides_inactive(subject_service, admin):
    assert "art" not in [s.subject_id for s in subject_service.list_active()]
    assert "art" in [s.subject_id for s in subject_service.list_all(actor=admin)]


def test_only_admins_manage_subjects(subject_service, leader):
    with pytest.raises(AuthorizationError):
        subject_service.save(actor=leader, subject_id="geo", translations={"it": "Geografia"})
    with pytest.raises(AuthorizationError):
        subject_service.delete(actor=leader, subject_id="math")


def test_delete_unknown_subject(subject_service, admin):
    subject_service.delete(actor=admin, subject_id="math")
    with pytest.raises(NotFoundError):
        subject_service.delete(actor=admin, subject_id="math")


def test_display_name_fallbacks(subject_service):
    math = subject_service.get("math")
    assert math.display_name("it") == "Matematica"
    assert math.display_name("fr") == "Math"
