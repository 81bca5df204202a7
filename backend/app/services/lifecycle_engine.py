"""
Lifecycle Engine - the only writer of report status and NGO assignment.

    Pending -> Accepted -> In Progress -> Rescued
    Pending -> Declined
    any     -> Closed (administrative)

Post-acceptance moves are restricted to the assigned NGO. Same-state moves
are rejected, so Rescued can only be reached once per report.
"""

from typing import Dict, FrozenSet, Optional

import structlog

from app.core.config import settings
from app.core.exceptions import InvalidTransitionError, NotAuthorizedError
from app.core.time_utils import bump
from app.schemas.actor import ActorRole
from app.schemas.report import RescueReport, ReportStatus
from app.services.identity_store import IdentityStore
from app.services.report_store import ReportStore

logger = structlog.get_logger()

# Moves an NGO may request through update_status
NGO_TRANSITIONS: Dict[ReportStatus, FrozenSet[ReportStatus]] = {
    ReportStatus.PENDING: frozenset({ReportStatus.ACCEPTED, ReportStatus.DECLINED}),
    ReportStatus.ACCEPTED: frozenset({ReportStatus.IN_PROGRESS, ReportStatus.RESCUED}),
    ReportStatus.IN_PROGRESS: frozenset({ReportStatus.RESCUED}),
    ReportStatus.RESCUED: frozenset(),
    ReportStatus.DECLINED: frozenset(),
    ReportStatus.CLOSED: frozenset(),
}

# Statuses anyone but the assigned NGO is locked out of
ASSIGNED_ONLY: FrozenSet[ReportStatus] = frozenset({ReportStatus.ACCEPTED, ReportStatus.IN_PROGRESS})


def can_transition(current: ReportStatus, new: ReportStatus) -> bool:
    return ReportStatus(new) in NGO_TRANSITIONS[ReportStatus(current)]


class LifecycleEngine:

    def __init__(self, reports: ReportStore, identities: IdentityStore):
        self._reports = reports
        self._identities = identities

    async def update_status(self, report_id: str, new_status: ReportStatus, acting_ngo_id: str) -> RescueReport:
        """
        Apply an NGO-driven status change.

        Raises NotFoundError for an unknown report or NGO,
        InvalidTransitionError if the move is not in the table and
        NotAuthorizedError if another NGO already owns the report.
        """
        new_status = ReportStatus(new_status)
        # Resolves the NGO or raises NotFoundError
        self._identities.get_by_id(acting_ngo_id, ActorRole.NGO)

        award_to: Optional[str] = None
        async with self._reports.locked(report_id) as report:
            current = report.status
            if not can_transition(current, new_status):
                raise InvalidTransitionError(
                    f"Cannot change status from {current.value} to {new_status.value}."
                )
            if current in ASSIGNED_ONLY and report.assigned_ngo_id != acting_ngo_id:
                raise NotAuthorizedError("Only the NGO handling this report can update it.")

            report.status = new_status
            report.updated_at = bump(report.updated_at)
            if new_status == ReportStatus.ACCEPTED and report.assigned_ngo_id is None:
                report.assigned_ngo_id = acting_ngo_id
            if new_status == ReportStatus.RESCUED:
                award_to = report.reporter_id

            await self._reports.persist()
            result = report.model_copy(deep=True)

        logger.info(
            "report_status_changed",
            report_id=report_id,
            from_status=current.value,
            to_status=new_status.value,
            ngo_id=acting_ngo_id,
        )

        if award_to:
            await self._identities.award_points(award_to, settings.RESCUE_POINTS)
        return result

    async def close(self, report_id: str) -> RescueReport:
        """
        Administrative close. Allowed from every state except Closed.
        """
        async with self._reports.locked(report_id) as report:
            current = report.status
            if current == ReportStatus.CLOSED:
                raise InvalidTransitionError("Report is already closed.")
            report.status = ReportStatus.CLOSED
            report.updated_at = bump(report.updated_at)
            await self._reports.persist()
            result = report.model_copy(deep=True)

        logger.info("report_closed", report_id=report_id, from_status=current.value)
        return result
