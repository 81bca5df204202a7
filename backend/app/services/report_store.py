"""
Report Store - owns every RescueReport.

Canonical order is most-recent-first: new reports go to the head.
Readers always get deep copies; the live records are only handed to the
lifecycle engine and the conversation log through `locked()`.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

import structlog

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.core.time_utils import get_utc_now
from app.schemas.actor import ActorRole
from app.schemas.report import Geolocation, RescueReport, ReportStatus
from app.services.case_service import CaseService
from app.services.identity_store import IdentityStore
from app.services.persistence import Persistence, REPORTS_KEY

logger = structlog.get_logger()


def newest_first(reports: List[RescueReport]) -> List[RescueReport]:
    return sorted(reports, key=lambda r: r.created_at, reverse=True)


class ReportStore:

    def __init__(self, persistence: Persistence, identities: IdentityStore):
        self._persistence = persistence
        self._identities = identities
        self._reports: List[RescueReport] = []
        self._locks: Dict[str, asyncio.Lock] = {}

    async def load(self):
        self._reports = [RescueReport.model_validate(r) for r in await self._persistence.load(REPORTS_KEY)]
        logger.info("report_store_loaded", reports=len(self._reports))

    def is_empty(self) -> bool:
        return not self._reports

    async def seed(self, reports: List[RescueReport]):
        self._reports = [r.model_copy(deep=True) for r in reports]
        await self.persist()

    async def persist(self):
        await self._persistence.save(REPORTS_KEY, [r.model_dump(mode="json") for r in self._reports])

    def _find(self, report_id: str) -> Optional[RescueReport]:
        for report in self._reports:
            if report.id == report_id:
                return report
        return None

    def _lock_for(self, report_id: str) -> asyncio.Lock:
        lock = self._locks.get(report_id)
        if lock is None:
            lock = self._locks[report_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def locked(self, report_id: str) -> AsyncIterator[RescueReport]:
        """
        Yields the live record under its per-report lock.
        Everything done inside the block is one read-modify-write.
        """
        if self._find(report_id) is None:
            raise NotFoundError("Report not found")
        async with self._lock_for(report_id):
            report = self._find(report_id)
            if report is None:
                raise NotFoundError("Report not found")
            yield report

    async def create(
        self,
        reporter_id: str,
        photo: str,
        description: str,
        location: Geolocation,
        triage_note: Optional[str] = None,
    ) -> RescueReport:
        """
        Insert a new Pending report and award the reporter for it.
        """
        if not self._identities.exists(reporter_id, ActorRole.REPORTER):
            raise NotFoundError("User not found")

        now = get_utc_now()
        report = RescueReport(
            id=CaseService.generate_id({r.id for r in self._reports}),
            reporter_id=reporter_id,
            photo=photo,
            description=description,
            location=location,
            status=ReportStatus.PENDING,
            assigned_ngo_id=None,
            created_at=now,
            updated_at=now,
            triage_note=triage_note,
            conversation=[],
        )
        self._reports.insert(0, report)
        await self.persist()
        logger.info("report_created", report_id=report.id, reporter_id=reporter_id)

        await self._identities.award_points(reporter_id, settings.REPORT_POINTS)
        return report.model_copy(deep=True)

    def get_by_id(self, report_id: str) -> RescueReport:
        report = self._find(report_id)
        if report is None:
            raise NotFoundError("Report not found")
        return report.model_copy(deep=True)

    def _select(self, predicate) -> List[RescueReport]:
        return [r.model_copy(deep=True) for r in newest_first([r for r in self._reports if predicate(r)])]

    def list_all(self) -> List[RescueReport]:
        return self._select(lambda r: True)

    def list_by_reporter(self, reporter_id: str) -> List[RescueReport]:
        return self._select(lambda r: r.reporter_id == reporter_id)

    def list_pending(self) -> List[RescueReport]:
        return self._select(lambda r: r.status == ReportStatus.PENDING)

    def list_by_ngo(self, ngo_id: str) -> List[RescueReport]:
        # A report the NGO has not accepted yet is never "by" that NGO
        return self._select(lambda r: r.assigned_ngo_id == ngo_id and r.status != ReportStatus.PENDING)

    def list_for_ngo_dashboard(self, ngo_id: str) -> List[RescueReport]:
        # Union of list_pending and list_by_ngo; one pass keeps each id once
        return self._select(
            lambda r: r.status == ReportStatus.PENDING
            or (r.assigned_ngo_id == ngo_id and r.status != ReportStatus.PENDING)
        )
