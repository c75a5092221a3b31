from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from ...common.identifiers import normalize_member_ids
from ...members.model import Member
from .base import EventContext
from .factory import ExemptionPolicyFactory


@dataclass(frozen=True)
class EligibilityResult:
    eligible: tuple[int, ...]
    exempt: tuple[int, ...]
    unknown: tuple[int, ...]

    @property
    def excluded_count(self) -> int:
        return len(self.exempt) + len(self.unknown)


class EligibilityResolver:
    """Split candidate ids into fineable, exempt and unresolvable members.

    Pure: it reads the supplied members and never touches storage, so it is
    re-evaluated on every reconciliation.
    """

    def __init__(self, factory: ExemptionPolicyFactory | None = None):
        self._factory = factory or ExemptionPolicyFactory()

    def resolve(
        self,
        context: EventContext,
        candidate_ids: Iterable[Any],
        members: Mapping[int, Member],
    ) -> EligibilityResult:
        ids = normalize_member_ids(candidate_ids)
        known = [members[m] for m in ids if m in members]
        unknown = tuple(m for m in ids if m not in members)

        exempt_set = self._factory.for_fine_type(context.fine_type).exempt_members(context, known)

        return EligibilityResult(
            eligible=tuple(m.member_id for m in known if m.member_id not in exempt_set),
            exempt=tuple(m.member_id for m in known if m.member_id in exempt_set),
            unknown=unknown,
        )
