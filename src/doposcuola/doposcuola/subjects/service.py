from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ..common.validators import normalize_subject_id
from ..core.constants import BASE_LANGUAGE, SUPPORTED_LANGUAGES
from ..core.enums import Capability
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import require
from ..users.model import User
from .model import SubjectDef
from .repository import SubjectRepository


class SubjectService:
    def __init__(self, subjects: SubjectRepository):
        self._subjects = subjects

    def list_active(self) -> Sequence[SubjectDef]:
        return self._subjects.list_all(active_only=True)

    def list_all(self, *, actor: User) -> Sequence[SubjectDef]:
        require(actor, Capability.MANAGE_SUBJECTS)
        return self._subjects.list_all()

    def get(self, subject_id: str) -> Optional[SubjectDef]:
        return self._subjects.get_by_id(subject_id)

    def save(
        self,
        *,
        actor: User,
        subject_id: str,
        translations: Mapping[str, str],
        icon: str = "📚",
        color: str = "bg-gray-100 text-gray-800",
        active: bool = True,
    ) -> SubjectDef:
        """Create or replace a subject.

        Missing languages are filled with the Italian name, which is required.
        """

        require(actor, Capability.MANAGE_SUBJECTS)

        normalized_id = normalize_subject_id(subject_id)
        base_name = (translations.get(BASE_LANGUAGE) or "").strip()
        if not base_name:
            raise ValidationError("Please fill ID and Italian Name (at least)")

        final = {lang: (translations.get(lang) or "").strip() or base_name for lang in SUPPORTED_LANGUAGES}
        subject = SubjectDef(
            subject_id=normalized_id,
            translations=final,
            icon=(icon or "📚").strip(),
            color=(color or "").strip(),
            active=bool(active),
        )
        self._subjects.upsert(subject)
        return subject

    def delete(self, *, actor: User, subject_id: str) -> None:
        require(actor, Capability.MANAGE_SUBJECTS)
        if not self._subjects.delete_by_id(subject_id):
            raise NotFoundError("Subject not found")
