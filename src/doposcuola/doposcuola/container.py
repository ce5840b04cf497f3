from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .announcements.mysql_announcement_repository import MySQLAnnouncementRepository
from .announcements.service import AnnouncementService
from .auth.mysql_auth_repository import MySQLAuthStore, MySQLPendingRegistrationRepository
from .auth.provider import AuthProvider
from .auth.service import AuthService
from .auth.token_provider import TokenAuthProvider
from .bookings.mysql_booking_repository import MySQLBookingRepository
from .bookings.service import BookingService
from .database.connection import DBConfig, DatabaseConnection
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.service import HolidayService
from .mail.mailer import build_mailer
from .reports.service import BookingReportService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.service import SystemSettingsService
from .subjects.mysql_subject_repository import MySQLSubjectRepository
from .subjects.service import SubjectService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    auth_provider: AuthProvider

    auth_service: AuthService
    user_service: UserService
    booking_service: BookingService
    subject_service: SubjectService
    announcement_service: AnnouncementService
    holiday_service: HolidayService
    settings_service: SystemSettingsService
    booking_report_service: BookingReportService


def build_container(*, db_config: dict, mail_config: Optional[dict] = None, public_url: str = "") -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    bookings_repo = MySQLBookingRepository(conn)
    subjects_repo = MySQLSubjectRepository(conn)
    announcements_repo = MySQLAnnouncementRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)
    settings_repo = MySQLSettingsRepository(conn)

    auth_provider = TokenAuthProvider(
        MySQLAuthStore(conn),
        build_mailer(mail_config or {}),
        public_url=public_url,
    )

    settings_service = SystemSettingsService(settings_repo)
    subject_service = SubjectService(subjects_repo)
    holiday_service = HolidayService(holidays_repo)

    return Container(
        conn=conn,
        auth_provider=auth_provider,
        auth_service=AuthService(
            auth_provider,
            users_repo,
            MySQLPendingRegistrationRepository(conn),
            settings_service,
        ),
        user_service=UserService(users_repo),
        booking_service=BookingService(bookings_repo, subject_service, holiday_service, settings_service),
        subject_service=subject_service,
        announcement_service=AnnouncementService(announcements_repo),
        holiday_service=holiday_service,
        settings_service=settings_service,
        booking_report_service=BookingReportService(bookings_repo, subject_service),
    )
