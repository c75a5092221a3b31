from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .common_works.mysql_common_work_repository import MySQLCommonWorkRepository
from .common_works.repository import CommonWorkRepository
from .common_works.service import CommonWorkService
from .core.constants import DEFAULT_SETTINGS_CACHE_TTL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .fines.eligibility.factory import ExemptionPolicyFactory
from .fines.eligibility.resolver import EligibilityResolver
from .fines.ledger import FineLedger
from .funerals.mysql_funeral_repository import MySQLFuneralRepository
from .funerals.repository import FuneralRepository
from .funerals.service import FuneralAttendanceService
from .meetings.counter import ConsecutiveAbsenceCounter
from .meetings.mysql_meeting_repository import MySQLMeetingRepository
from .meetings.recalculation import HistoricalRecalculationEngine
from .meetings.repository import MeetingRepository
from .meetings.service import MeetingAttendanceService
from .members.mysql_member_repository import MySQLMemberRepository
from .members.repository import MemberRepository
from .officers.mysql_officer_repository import MySQLOfficerRepository
from .officers.repository import OfficerRepository
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import FineSettingsProvider


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    members_repo: MemberRepository
    officers_repo: OfficerRepository
    settings_repo: SettingsRepository
    meetings_repo: MeetingRepository
    funerals_repo: FuneralRepository
    common_works_repo: CommonWorkRepository

    settings_provider: FineSettingsProvider
    ledger: FineLedger
    meeting_service: MeetingAttendanceService
    funeral_service: FuneralAttendanceService
    common_work_service: CommonWorkService


def assemble_container(
    *,
    members_repo: MemberRepository,
    officers_repo: OfficerRepository,
    settings_repo: SettingsRepository,
    meetings_repo: MeetingRepository,
    funerals_repo: FuneralRepository,
    common_works_repo: CommonWorkRepository,
    conn: Optional[DatabaseConnection] = None,
    settings_ttl_seconds: float = DEFAULT_SETTINGS_CACHE_TTL_SECONDS,
    retract_meeting_fines: bool = False,
    settings_provider: Optional[FineSettingsProvider] = None,
) -> Container:
    """Wire services on top of the given repositories (MySQL or in-memory)."""

    settings_provider = settings_provider or FineSettingsProvider(settings_repo, ttl_seconds=settings_ttl_seconds)
    resolver = EligibilityResolver(ExemptionPolicyFactory())
    ledger = FineLedger(members_repo)

    counter = ConsecutiveAbsenceCounter(members_repo, ledger)
    recalculation = HistoricalRecalculationEngine(
        members_repo,
        counter,
        retract_meeting_fines=retract_meeting_fines,
    )
    meeting_service = MeetingAttendanceService(
        meetings_repo,
        members_repo,
        counter,
        recalculation,
        resolver=resolver,
    )
    funeral_service = FuneralAttendanceService(
        funerals_repo,
        members_repo,
        officers_repo,
        ledger,
        settings_provider,
        resolver=resolver,
    )
    common_work_service = CommonWorkService(
        common_works_repo,
        members_repo,
        ledger,
        settings_provider,
        resolver=resolver,
    )

    return Container(
        conn=conn,
        members_repo=members_repo,
        officers_repo=officers_repo,
        settings_repo=settings_repo,
        meetings_repo=meetings_repo,
        funerals_repo=funerals_repo,
        common_works_repo=common_works_repo,
        settings_provider=settings_provider,
        ledger=ledger,
        meeting_service=meeting_service,
        funeral_service=funeral_service,
        common_work_service=common_work_service,
    )


def build_container(
    *,
    db_config: dict,
    settings_ttl_seconds: float = DEFAULT_SETTINGS_CACHE_TTL_SECONDS,
    retract_meeting_fines: bool = False,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble_container(
        conn=conn,
        members_repo=MySQLMemberRepository(conn),
        officers_repo=MySQLOfficerRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        meetings_repo=MySQLMeetingRepository(conn),
        funerals_repo=MySQLFuneralRepository(conn),
        common_works_repo=MySQLCommonWorkRepository(conn),
        settings_ttl_seconds=settings_ttl_seconds,
        retract_meeting_fines=retract_meeting_fines,
    )
