from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import SubjectDef


class SubjectRepository(Protocol):
    def get_by_id(self, subject_id: str) -> Optional[SubjectDef]:
        raise NotImplementedError

    def list_all(self, *, active_only: bool = False) -> Sequence[SubjectDef]:
        raise NotImplementedError

    def upsert(self, subject: SubjectDef) -> None:
        raise NotImplementedError

    def delete_by_id(self, subject_id: str) -> bool:
        raise NotImplementedError
