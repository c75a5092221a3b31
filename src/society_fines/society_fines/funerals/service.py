from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

import structlog

from ..common.identifiers import normalize_member_id, normalize_member_ids
from ..common.validators import require_list, require_non_empty, require_positive_amount
from ..core.constants import RECENT_FUNERALS_SCAN_LIMIT, ROTATION_ASSIGNMENT_SLOTS
from ..core.enums import FineType, FuneralRoster
from ..core.exceptions import NotFoundError, ValidationError
from ..fines.diff import AttendanceDiff, diff_absentees
from ..fines.eligibility.base import EventContext
from ..fines.eligibility.resolver import EligibilityResolver
from ..fines.ledger import FineLedger
from ..members.repository import MemberRepository
from ..officers.repository import OfficerRepository
from ..settings.service import FineSettingsProvider
from .model import AssignmentUpdate, Funeral, NewFuneral
from .repository import FuneralRepository

logger = structlog.get_logger(__name__)

WORK_FINE_TYPES = (FineType.FUNERAL_WORK, FineType.CEMETERY_WORK)
FUNERAL_FINE_TYPES = tuple(t for t in FineType if t.is_funeral_event)


@dataclass(frozen=True)
class FuneralAttendanceResult:
    funeral: Funeral
    fines_added: int
    fines_removed: int
    excluded_from_fines: int
    excluded_due_to_work_fines: int


@dataclass(frozen=True)
class RosterOutcome:
    fines_added: int = 0
    fines_removed: int = 0
    superseded: int = 0


@dataclass(frozen=True)
class WorkAttendanceResult:
    funeral: Funeral
    funeral_work: RosterOutcome
    cemetery_work: RosterOutcome

    @property
    def event_fines_removed(self) -> int:
        return self.funeral_work.superseded + self.cemetery_work.superseded


class FuneralAttendanceService:
    def __init__(
        self,
        funerals: FuneralRepository,
        members: MemberRepository,
        officers: OfficerRepository,
        ledger: FineLedger,
        settings: FineSettingsProvider,
        *,
        resolver: EligibilityResolver | None = None,
    ):
        self._funerals = funerals
        self._members = members
        self._officers = officers
        self._ledger = ledger
        self._settings = settings
        self._resolver = resolver or EligibilityResolver()

    def _require(self, funeral_id: Any) -> Funeral:
        if funeral_id in (None, "", "undefined", "null"):
            raise ValidationError("Funeral ID is required.")
        try:
            fid = int(funeral_id)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid funeral ID: {funeral_id!r}")
        funeral = self._funerals.get_by_id(fid)
        if not funeral:
            raise NotFoundError("Funeral not found.")
        return funeral

    def _require_by_deceased(self, deceased_id: Any) -> Funeral:
        funeral = self._funerals.get_by_deceased_id(require_non_empty(str(deceased_id or ""), "deceased_id"))
        if not funeral:
            raise NotFoundError("Funeral not found for the given deceased ID")
        return funeral

    # --- funeral records ------------------------------------------------------

    def create_funeral(
        self,
        *,
        funeral_date: date,
        member_id: Any,
        deceased_id: Any,
        cemetery_assignments: Any = None,
        funeral_assignments: Any = None,
        removed_members: Any = None,
    ) -> Funeral:
        reporting_id = normalize_member_id(member_id)
        if deceased_id == "member":
            deceased_id = reporting_id
        deceased = require_non_empty(str(deceased_id if deceased_id is not None else ""), "deceased_id")

        if not self._members.get_by_id(reporting_id):
            raise NotFoundError("Member not found.")

        funeral_id = self._funerals.create(
            NewFuneral(
                funeral_date=funeral_date,
                member_id=reporting_id,
                deceased_id=deceased,
                cemetery_assignments=tuple(normalize_member_ids(cemetery_assignments)),
                funeral_assignments=tuple(normalize_member_ids(funeral_assignments)),
                removed_members=tuple(normalize_member_ids(removed_members)),
            )
        )
        logger.info("funeral_created", funeral_id=funeral_id, member_id=reporting_id, deceased_id=deceased)
        return self._require(funeral_id)

    def update_assignments(
        self,
        funeral_id: Any,
        *,
        cemetery_assignments: Any = None,
        funeral_assignments: Any = None,
        removed_members: Any = None,
        funeral_date: Optional[date] = None,
    ) -> Funeral:
        funeral = self._require(funeral_id)
        self._funerals.update_assignments(
            funeral_id=funeral.funeral_id,
            update=AssignmentUpdate(
                cemetery_assignments=tuple(normalize_member_ids(cemetery_assignments)),
                funeral_assignments=tuple(normalize_member_ids(funeral_assignments)),
                removed_members=tuple(normalize_member_ids(removed_members)),
                funeral_date=funeral_date,
            ),
        )
        return self._require(funeral.funeral_id)

    def get_last_assignment_info(self) -> dict:
        """Continue the cemetery duty rotation from the last fully staffed funeral."""

        for funeral in self._funerals.list_recent(RECENT_FUNERALS_SCAN_LIMIT):
            if len(funeral.cemetery_assignments) >= ROTATION_ASSIGNMENT_SLOTS:
                return {
                    "lastMember_id": funeral.cemetery_assignments[ROTATION_ASSIGNMENT_SLOTS - 1],
                    "removedMembers_ids": list(funeral.removed_members),
                }
        return {"lastMember_id": 0, "removedMembers_ids": []}

    # --- attendance roster ----------------------------------------------------

    def update_event_absents(self, funeral_id: Any, absent_array: Any) -> FuneralAttendanceResult:
        absents = normalize_member_ids(require_list(absent_array, "absentArray"))
        funeral = self._require(funeral_id)
        fine_amount = self._settings.get_fine_settings().amount_for(FineType.FUNERAL)

        diff = diff_absentees(funeral.event_absents, absents)
        fines_removed = self._remove_for_present(funeral, diff, FineType.FUNERAL)

        reporting = self._members.get_by_id(funeral.member_id)
        context = EventContext(
            fine_type=FineType.FUNERAL,
            event_id=funeral.funeral_id,
            area=reporting.area if reporting else None,
            assigned_ids=funeral.assigned_ids,
            removed_ids=frozenset(funeral.removed_members),
            officers=self._officers.get_roster(),
        )
        candidates = {m.member_id: m for m in self._members.get_many(diff.newly_absent)}
        eligibility = self._resolver.resolve(context, diff.newly_absent, candidates)

        with_work_fines: set[int] = set()
        if eligibility.eligible:
            with_work_fines = self._members.members_with_fine(
                event_id=funeral.funeral_id,
                event_types=WORK_FINE_TYPES,
                member_ids=eligibility.eligible,
            )

        fines_added = 0
        for member_id in eligibility.eligible:
            if member_id in with_work_fines:
                continue
            try:
                if self._ledger.apply_fine(
                    member_id,
                    event_id=funeral.funeral_id,
                    fine_type=FineType.FUNERAL,
                    amount=fine_amount,
                ).added:
                    fines_added += 1
            except Exception:
                logger.exception("funeral_fine_failed", member_id=member_id, funeral_id=funeral.funeral_id)

        self._funerals.update_roster(funeral_id=funeral.funeral_id, roster=FuneralRoster.EVENT, member_ids=absents)

        logger.info(
            "funeral_attendance_updated",
            funeral_id=funeral.funeral_id,
            fines_added=fines_added,
            fines_removed=fines_removed,
            exempt=len(eligibility.exempt),
            unknown=len(eligibility.unknown),
            work_fined=len(with_work_fines),
        )
        return FuneralAttendanceResult(
            funeral=self._require(funeral.funeral_id),
            fines_added=fines_added,
            fines_removed=fines_removed,
            excluded_from_fines=eligibility.excluded_count,
            excluded_due_to_work_fines=len(with_work_fines),
        )

    def _remove_for_present(self, funeral: Funeral, diff: AttendanceDiff, fine_type: FineType) -> int:
        removed = 0
        for member_id in diff.newly_present:
            try:
                if self._ledger.remove_fine(member_id, event_id=funeral.funeral_id, fine_type=fine_type):
                    removed += 1
            except Exception:
                logger.exception(
                    "funeral_fine_removal_failed",
                    member_id=member_id,
                    funeral_id=funeral.funeral_id,
                    fine_type=fine_type.value,
                )
        return removed

    # --- work rosters ---------------------------------------------------------

    def update_work_attendance(
        self,
        funeral_id: Any,
        *,
        funeral_work_absents: Any = None,
        cemetery_work_absents: Any = None,
    ) -> WorkAttendanceResult:
        funeral = self._require(funeral_id)
        new_rosters = {
            FuneralRoster.FUNERAL_WORK: normalize_member_ids(funeral_work_absents or []),
            FuneralRoster.CEMETERY_WORK: normalize_member_ids(cemetery_work_absents or []),
        }
        settings = self._settings.get_fine_settings()

        outcomes: dict[FuneralRoster, RosterOutcome] = {}
        for roster, absents in new_rosters.items():
            outcomes[roster] = self._reconcile_work_roster(
                funeral,
                roster,
                absents,
                amount=settings.amount_for(roster.fine_type),
            )

        for roster, absents in new_rosters.items():
            self._funerals.update_roster(funeral_id=funeral.funeral_id, roster=roster, member_ids=absents)

        result = WorkAttendanceResult(
            funeral=self._require(funeral.funeral_id),
            funeral_work=outcomes[FuneralRoster.FUNERAL_WORK],
            cemetery_work=outcomes[FuneralRoster.CEMETERY_WORK],
        )
        logger.info(
            "funeral_work_attendance_updated",
            funeral_id=funeral.funeral_id,
            funeral_work=outcomes[FuneralRoster.FUNERAL_WORK],
            cemetery_work=outcomes[FuneralRoster.CEMETERY_WORK],
            event_fines_removed=result.event_fines_removed,
        )
        return result

    def _reconcile_work_roster(
        self,
        funeral: Funeral,
        roster: FuneralRoster,
        absents: list[int],
        *,
        amount: int,
    ) -> RosterOutcome:
        fine_type = roster.fine_type
        diff = diff_absentees(funeral.roster(roster), absents)
        removed = self._remove_for_present(funeral, diff, fine_type)

        candidates = {m.member_id: m for m in self._members.get_many(diff.newly_absent)}
        eligibility = self._resolver.resolve(
            EventContext(fine_type=fine_type, event_id=funeral.funeral_id),
            diff.newly_absent,
            candidates,
        )

        added = superseded = 0
        for member_id in eligibility.eligible:
            try:
                application = self._ledger.apply_fine(
                    member_id,
                    event_id=funeral.funeral_id,
                    fine_type=fine_type,
                    amount=amount,
                )
            except Exception:
                logger.exception("funeral_work_fine_failed", member_id=member_id, funeral_id=funeral.funeral_id)
                continue
            added += int(application.added)
            superseded += application.superseded

        return RosterOutcome(fines_added=added, fines_removed=removed, superseded=superseded)

    # --- fine lookups ---------------------------------------------------------

    def get_funeral_fines(self, funeral_id: Any) -> dict:
        funeral = self._require(funeral_id)
        fined = [
            f for f in self._members.list_fined_members(event_id=funeral.funeral_id, event_type=FineType.FUNERAL)
            if f.total_amount > 0
        ]
        return {
            "finedMembers": [
                {
                    "member_id": f.member_id,
                    "name": f.name,
                    "fineAmount": f.fines[0].amount,
                    "fineCount": len(f.fines),
                }
                for f in fined
            ],
            "totalFinedMembers": len(fined),
            "totalFineAmount": sum(f.fines[0].amount for f in fined),
        }

    def get_work_fine_amounts(self, funeral_id: Any) -> dict:
        """Amounts actually levied for this funeral, falling back to current settings."""

        funeral = self._require(funeral_id)
        settings = self._settings.get_fine_settings()

        amounts: dict[str, int] = {}
        for key, fine_type in (("funeralWorkFine", FineType.FUNERAL_WORK), ("cemeteryWorkFine", FineType.CEMETERY_WORK)):
            fined = self._members.list_fined_members(event_id=funeral.funeral_id, event_type=fine_type)
            amounts[key] = fined[0].fines[0].amount if fined else settings.amount_for(fine_type)
        return amounts

    # --- extra dues -----------------------------------------------------------

    def record_extra_due(self, *, deceased_id: Any, member_id: Any, amount: Any) -> bool:
        """Levy an extraDue fine; independent of attendance and work fines.

        Returns False when the member already carries an extra due for this funeral.
        """

        funeral = self._require_by_deceased(deceased_id)
        due_member_id = normalize_member_id(member_id)
        value = require_positive_amount(amount, "amount")
        if not self._members.get_by_id(due_member_id):
            raise NotFoundError("Member not found.")

        added = self._ledger.apply_fine(
            due_member_id,
            event_id=funeral.funeral_id,
            fine_type=FineType.EXTRA_DUE,
            amount=value,
        ).added
        self._funerals.add_extra_due_member(funeral_id=funeral.funeral_id, member_id=due_member_id)

        logger.info("extra_due_recorded", funeral_id=funeral.funeral_id, member_id=due_member_id, added=added)
        return added

    def get_extra_dues(self, deceased_id: Any) -> list[dict]:
        funeral = self._require_by_deceased(deceased_id)
        entries = [
            {"memberId": f.member_id, "name": f.name, "extraDue": fine.amount, "id": fine.fine_id}
            for f in self._members.list_fined_members(event_id=funeral.funeral_id, event_type=FineType.EXTRA_DUE)
            for fine in f.fines
        ]
        entries.reverse()
        return entries

    def delete_by_deceased_id(self, deceased_id: Any) -> int:
        """Delete the funeral and every fine referencing it; returns fines removed."""

        funeral = self._require_by_deceased(deceased_id)
        removed = self._members.remove_fines_for_event(event_id=funeral.funeral_id, event_types=FUNERAL_FINE_TYPES)
        self._funerals.delete(funeral.funeral_id)
        logger.info("funeral_deleted", funeral_id=funeral.funeral_id, fines_removed=removed)
        return removed
