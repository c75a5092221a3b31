from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional

import structlog

from ..common.datetime_utils import now_local
from ..common.identifiers import normalize_member_ids
from ..common.validators import require_list, require_non_empty
from ..core.constants import ATTENDANCE_EXEMPT_STATUSES, COMMON_WORK_ROSTER_EXCLUDED_ROLES
from ..core.enums import FineType
from ..core.exceptions import NotFoundError, ValidationError
from ..fines.diff import diff_absentees
from ..fines.eligibility.base import EventContext
from ..fines.eligibility.resolver import EligibilityResolver
from ..fines.ledger import FineLedger
from ..members.repository import MemberRepository
from ..settings.service import FineSettingsProvider
from .model import AttendanceStats, CommonWork, CommonWorkDraft
from .repository import CommonWorkRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CommonWorkSaveResult:
    work_id: int
    is_update: bool
    fines_added: int
    fines_removed: int
    stats: AttendanceStats

    @property
    def message(self) -> str:
        if self.is_update:
            return "Common work attendance updated successfully."
        return "Common work attendance saved successfully."


class CommonWorkService:
    def __init__(
        self,
        works: CommonWorkRepository,
        members: MemberRepository,
        ledger: FineLedger,
        settings: FineSettingsProvider,
        *,
        resolver: EligibilityResolver | None = None,
        today: Callable[[], date] = lambda: now_local().date(),
    ):
        self._works = works
        self._members = members
        self._ledger = ledger
        self._settings = settings
        self._resolver = resolver or EligibilityResolver()
        self._today = today

    def _expected_roster(self) -> list[int]:
        return [
            m.member_id
            for m in self._members.list_active(
                exclude_statuses=ATTENDANCE_EXEMPT_STATUSES,
                exclude_roles=COMMON_WORK_ROSTER_EXCLUDED_ROLES,
            )
        ]

    def _require(self, work_id: Any) -> CommonWork:
        if work_id in (None, "", "undefined", "null"):
            raise ValidationError("Invalid common work ID provided.")
        try:
            wid = int(work_id)
        except (TypeError, ValueError):
            raise ValidationError("Invalid common work ID provided.")
        work = self._works.get_by_id(wid)
        if not work:
            raise NotFoundError("Common work not found.")
        return work

    def save_attendance(
        self,
        *,
        work_date: date,
        title: str,
        remarks: Optional[str] = None,
        absent_array: Any = None,
    ) -> CommonWorkSaveResult:
        title = require_non_empty(title, "title")
        absents = normalize_member_ids(require_list(absent_array if absent_array is not None else [], "absentArray"))
        fine_amount = self._settings.get_fine_settings().amount_for(FineType.COMMON_WORK)

        stats = AttendanceStats.compute(
            expected=len(self._expected_roster()),
            absent=len(absents),
            fine_amount=fine_amount,
        )
        draft = CommonWorkDraft(
            work_date=work_date,
            title=title,
            remarks=remarks or "",
            absents=tuple(absents),
            stats=stats,
        )

        existing = self._works.get_by_date(work_date)
        if existing:
            diff = diff_absentees(existing.absents, absents)
            work_id = existing.work_id
            fines_removed = self._remove_fines(work_id, diff.newly_present)
            fines_added = self._add_fines(work_id, diff.newly_absent, fine_amount)
            self._works.update(work_id=work_id, draft=draft)
        else:
            work_id = self._works.create(draft)
            fines_removed = 0
            fines_added = self._add_fines(work_id, absents, fine_amount)

        result = CommonWorkSaveResult(
            work_id=work_id,
            is_update=existing is not None,
            fines_added=fines_added,
            fines_removed=fines_removed,
            stats=stats,
        )
        logger.info(
            "common_work_saved",
            work_id=work_id,
            is_update=result.is_update,
            fines_added=fines_added,
            fines_removed=fines_removed,
            expected=stats.total_expected,
            absent=stats.total_absent,
        )
        return result

    def _add_fines(self, work_id: int, member_ids: Any, amount: int) -> int:
        ids = normalize_member_ids(member_ids)
        if not ids:
            return 0
        candidates = {m.member_id: m for m in self._members.get_many(ids)}
        eligibility = self._resolver.resolve(
            EventContext(fine_type=FineType.COMMON_WORK, event_id=work_id),
            ids,
            candidates,
        )

        added = 0
        for member_id in eligibility.eligible:
            try:
                if self._ledger.apply_fine(
                    member_id,
                    event_id=work_id,
                    fine_type=FineType.COMMON_WORK,
                    amount=amount,
                ).added:
                    added += 1
            except Exception:
                logger.exception("common_work_fine_failed", member_id=member_id, work_id=work_id)
        return added

    def _remove_fines(self, work_id: int, member_ids: Any) -> int:
        removed = 0
        for member_id in normalize_member_ids(member_ids):
            try:
                if self._ledger.remove_fine(member_id, event_id=work_id, fine_type=FineType.COMMON_WORK):
                    removed += 1
            except Exception:
                logger.exception("common_work_fine_removal_failed", member_id=member_id, work_id=work_id)
        return removed

    def get_by_id(self, work_id: Any) -> CommonWork:
        return self._require(work_id)

    def get_by_date(self, work_date: date) -> Optional[CommonWork]:
        return self._works.get_by_date(work_date)

    def get_fine_amount(self, work_id: Any) -> int:
        """Amount levied for this work, or the current setting when nobody was fined."""

        work = self._require(work_id)
        fined = self._members.list_fined_members(event_id=work.work_id, event_type=FineType.COMMON_WORK)
        if fined:
            return fined[0].fines[0].amount
        return self._settings.get_fine_settings().amount_for(FineType.COMMON_WORK)

    def get_yearly_stats(self, year: Optional[Any] = None) -> dict:
        if year in (None, ""):
            year = self._today().year
        try:
            year = int(year)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid year: {year!r}")

        works = self._works.list_by_year(year)
        rated = [w.attendance_rate for w in works if w.total_expected > 0]
        return {
            "year": year,
            "totalWorks": len(works),
            "totalExpectedAttendance": sum(w.total_expected for w in works),
            "totalActualAttendance": sum(w.total_present for w in works),
            "totalFineAmount": sum(w.total_fine_amount for w in works),
            "avgAttendanceRate": round(sum(rated) / len(rated), 1) if rated else 0.0,
            "works": [
                {
                    "workId": w.work_id,
                    "date": w.work_date.isoformat(),
                    "title": w.title,
                    "attendanceRate": w.attendance_rate,
                }
                for w in works
            ],
        }

    def delete(self, work_id: Any) -> int:
        """Delete the work and its common-work fines; returns fines removed."""

        work = self._require(work_id)
        removed = self._members.remove_fines_for_event(
            event_id=work.work_id,
            event_types=(FineType.COMMON_WORK,),
        )
        self._works.delete(work.work_id)
        logger.info("common_work_deleted", work_id=work.work_id, fines_removed=removed)
        return removed
