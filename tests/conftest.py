from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.doposcuola.doposcuola.announcements.model import Announcement
from src.doposcuola.doposcuola.announcements.service import AnnouncementService
from src.doposcuola.doposcuola.auth.model import AuthIdentity, AuthSession, PendingRegistration
from src.doposcuola.doposcuola.auth.service import AuthService
from src.doposcuola.doposcuola.auth.token_provider import TokenAuthProvider
from src.doposcuola.doposcuola.bookings.model import Booking
from src.doposcuola.doposcuola.bookings.service import BookingService
from src.doposcuola.doposcuola.container import Container
from src.doposcuola.doposcuola.core.enums import AttendanceMark, Role, UserStatus
from src.doposcuola.doposcuola.holidays.model import Holiday
from src.doposcuola.doposcuola.holidays.service import HolidayService
from src.doposcuola.doposcuola.reports.service import BookingReportService
from src.doposcuola.doposcuola.settings.service import SystemSettingsService
from src.doposcuola.doposcuola.subjects.model import SubjectDef
from src.doposcuola.doposcuola.subjects.service import SubjectService
from src.doposcuola.doposcuola.users.model import User
from src.doposcuola.doposcuola.users.service import UserService

# Monday; 2024-06-04 is the Tuesday class day
TODAY = date(2024, 6, 3)


# ---------- in-memory repositories ----------


@dataclass
class InMemoryUsers:
    users: dict[str, User] = field(default_factory=dict)

    def add(self, user: User) -> User:
        self.users[user.user_id] = user
        return user

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        for u in self.users.values():
            if u.email.lower() == (email or "").lower():
                return u
        return None

    def upsert_profile(self, user: User) -> User:
        self.users[user.user_id] = user
        return user

    def list_all(self):
        return sorted(self.users.values(), key=lambda u: u.name)

    def list_pending(self):
        return [u for u in self.list_all() if u.status == UserStatus.PENDING]

    def list_emails(self):
        return sorted(u.email for u in self.users.values())

    def set_status(self, user_id: str, status) -> bool:
        if user_id not in self.users:
            return False
        self.users[user_id] = replace(self.users[user_id], status=status)
        return True

    def set_leader(self, user_id: str, *, is_leader: bool) -> bool:
        if user_id not in self.users:
            return False
        self.users[user_id] = replace(self.users[user_id], is_leader=is_leader)
        return True

    def delete_by_id(self, user_id: str) -> bool:
        return self.users.pop(user_id, None) is not None


@dataclass
class InMemoryBookings:
    rows: dict[int, Booking] = field(default_factory=dict)
    next_id: int = 1

    def get_by_id(self, booking_id: int) -> Optional[Booking]:
        return self.rows.get(booking_id)

    def list_for_student_on_date(self, *, student_id: str, booking_date: date):
        return [b for b in self.rows.values() if b.student_id == student_id and b.booking_date == booking_date]

    def list_for_student(self, *, student_id: str, from_date: Optional[date] = None):
        return [
            b
            for b in sorted(self.rows.values(), key=lambda b: (b.booking_date, b.booking_id))
            if b.student_id == student_id and (from_date is None or b.booking_date >= from_date)
        ]

    def list_for_date(self, booking_date: date):
        return [b for b in self.rows.values() if b.booking_date == booking_date]

    def list_range(self, *, start: date, end: date):
        return sorted(
            (b for b in self.rows.values() if start <= b.booking_date <= end),
            key=lambda b: (b.booking_date, b.booking_id),
        )

    def create(self, *, student_id: str, student_name: str, subject_id: str, booking_date: date) -> int:
        booking_id = self.next_id
        self.next_id += 1
        self.rows[booking_id] = Booking(
            booking_id=booking_id,
            student_id=student_id,
            student_name=student_name,
            subject_id=subject_id,
            booking_date=booking_date,
        )
        return booking_id

    def delete_by_id(self, booking_id: int) -> bool:
        return self.rows.pop(booking_id, None) is not None

    def _update(self, booking_id: int, **changes) -> bool:
        if booking_id not in self.rows:
            return False
        self.rows[booking_id] = replace(self.rows[booking_id], **changes)
        return True

    def set_teacher(self, booking_id: int, *, teacher_id, teacher_name) -> bool:
        return self._update(booking_id, teacher_id=teacher_id, teacher_name=teacher_name)

    def set_notes(self, booking_id: int, notes) -> bool:
        return self._update(booking_id, notes=notes)

    def set_attendance(self, booking_id: int, attendance: AttendanceMark) -> bool:
        return self._update(booking_id, attendance=attendance)


@dataclass
class InMemorySubjects:
    subjects: dict[str, SubjectDef] = field(default_factory=dict)

    def get_by_id(self, subject_id: str) -> Optional[SubjectDef]:
        return self.subjects.get(subject_id)

    def list_all(self, *, active_only: bool = False):
        return [s for s in sorted(self.subjects.values(), key=lambda s: s.subject_id) if s.active or not active_only]

    def upsert(self, subject: SubjectDef) -> None:
        self.subjects[subject.subject_id] = subject

    def delete_by_id(self, subject_id: str) -> bool:
        return self.subjects.pop(subject_id, None) is not None


@dataclass
class InMemoryHolidays:
    rows: dict[int, Holiday] = field(default_factory=dict)
    next_id: int = 1

    def list_all(self):
        return sorted(self.rows.values(), key=lambda h: h.holiday_date)

    def list_range(self, *, start: date, end: date):
        return [h for h in self.list_all() if start <= h.holiday_date <= end]

    def get_for_date(self, holiday_date: date) -> Optional[Holiday]:
        for h in self.rows.values():
            if h.holiday_date == holiday_date:
                return h
        return None

    def create_many(self, *, dates, reason: str) -> int:
        for d in dates:
            self.rows[self.next_id] = Holiday(holiday_id=self.next_id, holiday_date=d, reason=reason)
            self.next_id += 1
        return len(dates)

    def delete_by_id(self, holiday_id: int) -> bool:
        return self.rows.pop(holiday_id, None) is not None


@dataclass
class InMemoryAnnouncements:
    rows: dict[int, Announcement] = field(default_factory=dict)
    next_id: int = 1

    def create(self, *, title: str, content: str, author_name: str, created_at: datetime) -> int:
        announcement_id = self.next_id
        self.next_id += 1
        self.rows[announcement_id] = Announcement(
            announcement_id=announcement_id,
            title=title,
            content=content,
            author_name=author_name,
            created_at=created_at,
        )
        return announcement_id

    def list_recent(self, *, limit: Optional[int] = None):
        items = sorted(self.rows.values(), key=lambda a: (a.created_at, a.announcement_id), reverse=True)
        return items[:limit] if limit is not None else items

    def delete_by_id(self, announcement_id: int) -> bool:
        return self.rows.pop(announcement_id, None) is not None


@dataclass
class InMemorySettings:
    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


@dataclass
class InMemoryPending:
    rows: dict[str, PendingRegistration] = field(default_factory=dict)

    def save(self, registration: PendingRegistration) -> None:
        self.rows[registration.email.lower()] = registration

    def get(self, email: str) -> Optional[PendingRegistration]:
        return self.rows.get((email or "").lower())

    def delete(self, email: str) -> bool:
        return self.rows.pop((email or "").lower(), None) is not None


@dataclass
class _Token:
    identity_id: str
    purpose: object
    token_hash: str
    expires_at: datetime
    used: bool = False
    attempts: int = 0


@dataclass
class _StoredSession:
    identity_id: str
    is_recovery: bool
    created_at: datetime
    revoked: bool = False


@dataclass
class InMemoryAuthStore:
    identities: dict[str, AuthIdentity] = field(default_factory=dict)
    tokens: list[_Token] = field(default_factory=list)
    sessions: dict[str, _StoredSession] = field(default_factory=dict)

    def get_identity_by_email(self, email: str) -> Optional[AuthIdentity]:
        for i in self.identities.values():
            if i.email.lower() == (email or "").lower():
                return i
        return None

    def get_identity(self, identity_id: str) -> Optional[AuthIdentity]:
        return self.identities.get(identity_id)

    def create_identity(self, *, identity_id: str, email: str) -> AuthIdentity:
        identity = AuthIdentity(identity_id=identity_id, email=email)
        self.identities[identity_id] = identity
        return identity

    def set_password_hash(self, identity_id: str, password_hash: str) -> bool:
        if identity_id not in self.identities:
            return False
        self.identities[identity_id] = replace(self.identities[identity_id], password_hash=password_hash)
        return True

    def touch_sign_in(self, identity_id: str, *, at: datetime) -> None:
        pass

    def add_token(self, *, identity_id, purpose, token_hash, expires_at) -> None:
        self.tokens.append(_Token(identity_id, purpose, token_hash, expires_at))

    def invalidate_tokens(self, *, identity_id, purposes, at) -> None:
        for t in self.tokens:
            if t.identity_id == identity_id and t.purpose in purposes:
                t.used = True

    def consume_token(self, *, purpose, token_hash, now, identity_id=None) -> Optional[str]:
        for t in self.tokens:
            if t.used or t.purpose != purpose or t.token_hash != token_hash or t.expires_at <= now:
                continue
            if identity_id is not None and t.identity_id != identity_id:
                continue
            t.used = True
            return t.identity_id
        return None

    def record_failed_attempt(self, *, identity_id, purpose, now) -> int:
        live = [
            t
            for t in self.tokens
            if t.identity_id == identity_id and t.purpose == purpose and not t.used and t.expires_at > now
        ]
        for t in live:
            t.attempts += 1
        return max((t.attempts for t in live), default=0)

    def create_session(self, *, identity_id: str, token_hash: str, is_recovery: bool, created_at: datetime) -> None:
        self.sessions[token_hash] = _StoredSession(identity_id, is_recovery, created_at)

    def get_session(self, token_hash: str, *, created_after: datetime) -> Optional[AuthSession]:
        stored = self.sessions.get(token_hash)
        if stored is None or stored.revoked or stored.created_at <= created_after:
            return None
        identity = self.identities[stored.identity_id]
        return AuthSession(access_token="", user_id=identity.identity_id, email=identity.email, is_recovery=stored.is_recovery)

    def revoke_session(self, token_hash: str, *, at: datetime) -> bool:
        stored = self.sessions.get(token_hash)
        if stored is None or stored.revoked:
            return False
        stored.revoked = True
        return True


@dataclass
class Outbox:
    messages: list[dict] = field(default_factory=list)

    def send(self, *, to: str, subject: str, text: str) -> None:
        self.messages.append({"to": to, "subject": subject, "text": text})

    def last_code(self) -> str:
        return re.search(r"code is: (\d{6})", self.messages[-1]["text"]).group(1)

    def last_token(self) -> str:
        return re.search(r"token=([A-Za-z0-9_\-]+)", self.messages[-1]["text"]).group(1)


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ---------- people ----------


def make_user(user_id: str, name: str, role: Role, **overrides) -> User:
    defaults = dict(
        user_id=user_id,
        name=name,
        email=f"{user_id}@doposcuola.test",
        role=role,
        age=30 if role == Role.TEACHER else 17,
        status=UserStatus.APPROVED,
    )
    defaults.update(overrides)
    return User(**defaults)


@pytest.fixture
def student() -> User:
    return make_user("stu-1", "Giulia Rossi", Role.STUDENT)


@pytest.fixture
def other_student() -> User:
    return make_user("stu-2", "Marco Bianchi", Role.STUDENT)


@pytest.fixture
def teacher_a() -> User:
    return make_user("tea-a", "Anna Verdi", Role.TEACHER)


@pytest.fixture
def teacher_b() -> User:
    return make_user("tea-b", "Bruno Neri", Role.TEACHER)


@pytest.fixture
def leader() -> User:
    return make_user("lead-1", "Laura Leader", Role.TEACHER, is_leader=True)


@pytest.fixture
def admin() -> User:
    return make_user("adm-1", "Alberto Admin", Role.TEACHER, is_admin=True)


@pytest.fixture
def pending_student() -> User:
    return make_user("stu-p", "Paolo Pending", Role.STUDENT, status=UserStatus.PENDING)


# ---------- repositories and services ----------


@pytest.fixture
def users_repo(student, other_student, teacher_a, teacher_b, leader, admin, pending_student) -> InMemoryUsers:
    repo = InMemoryUsers()
    for u in (student, other_student, teacher_a, teacher_b, leader, admin, pending_student):
        repo.add(u)
    return repo


@pytest.fixture
def subjects_repo() -> InMemorySubjects:
    repo = InMemorySubjects()
    for subject_id, it, en, active in (
        ("math", "Matematica", "Math", True),
        ("science", "Scienze", "Science", True),
        ("history", "Storia", "History", True),
        ("art", "Arte", "Art", False),
    ):
        repo.upsert(SubjectDef(subject_id=subject_id, translations={"it": it, "en": en}, active=active))
    return repo


@pytest.fixture
def bookings_repo() -> InMemoryBookings:
    return InMemoryBookings()


@pytest.fixture
def holidays_repo() -> InMemoryHolidays:
    return InMemoryHolidays()


@pytest.fixture
def settings_repo() -> InMemorySettings:
    return InMemorySettings()


@pytest.fixture
def settings_service(settings_repo) -> SystemSettingsService:
    return SystemSettingsService(settings_repo)


@pytest.fixture
def subject_service(subjects_repo) -> SubjectService:
    return SubjectService(subjects_repo)


@pytest.fixture
def holiday_service(holidays_repo) -> HolidayService:
    return HolidayService(holidays_repo)


@pytest.fixture
def booking_service(bookings_repo, subject_service, holiday_service, settings_service) -> BookingService:
    return BookingService(bookings_repo, subject_service, holiday_service, settings_service, today=lambda: TODAY)


@pytest.fixture
def user_service(users_repo) -> UserService:
    return UserService(users_repo)


@pytest.fixture
def announcements_repo() -> InMemoryAnnouncements:
    return InMemoryAnnouncements()


@pytest.fixture
def clock() -> Clock:
    return Clock(datetime(2024, 6, 3, 15, 0))


@pytest.fixture
def announcement_service(announcements_repo, clock) -> AnnouncementService:
    return AnnouncementService(announcements_repo, clock=clock)


@pytest.fixture
def report_service(bookings_repo, subject_service) -> BookingReportService:
    return BookingReportService(bookings_repo, subject_service)


@pytest.fixture
def auth_store(users_repo) -> InMemoryAuthStore:
    """Every seeded profile can sign in with password ``secret123``."""

    store = InMemoryAuthStore()
    for u in users_repo.users.values():
        store.identities[u.user_id] = AuthIdentity(
            identity_id=u.user_id, email=u.email, password_hash=generate_password_hash("secret123")
        )
    return store


@pytest.fixture
def outbox() -> Outbox:
    return Outbox()


@pytest.fixture
def auth_provider(auth_store, outbox, clock) -> TokenAuthProvider:
    return TokenAuthProvider(auth_store, outbox, public_url="http://portal.test/", clock=clock)


@pytest.fixture
def pending_repo() -> InMemoryPending:
    return InMemoryPending()


@pytest.fixture
def auth_service(auth_provider, users_repo, pending_repo, settings_service) -> AuthService:
    return AuthService(auth_provider, users_repo, pending_repo, settings_service, today=lambda: TODAY)


# ---------- flask ----------


@pytest.fixture
def container(
    auth_provider,
    auth_service,
    user_service,
    booking_service,
    subject_service,
    announcement_service,
    holiday_service,
    settings_service,
    report_service,
) -> Container:
    return Container(
        conn=None,
        auth_provider=auth_provider,
        auth_service=auth_service,
        user_service=user_service,
        booking_service=booking_service,
        subject_service=subject_service,
        announcement_service=announcement_service,
        holiday_service=holiday_service,
        settings_service=settings_service,
        booking_report_service=report_service,
    )


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.doposcuola.doposcuola.main import create_app

    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(user: User, password: str = "secret123"):
        resp = client.post("/auth/login/password", json={"email": user.email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp

    return _login
