from collections import Counter
from typing import List, Union

from app.schemas.actor import ActorRole, Reporter, NGO
from app.schemas.report import RescueReport, ReportDetail, ReporterSummary, ReportStatus
from app.services.identity_store import IdentityStore
from app.services.report_store import ReportStore


class DashboardService:
    """
    Read-only, role-scoped views over the identity and report stores.
    """

    def __init__(self, identities: IdentityStore, reports: ReportStore):
        self._identities = identities
        self._reports = reports

    def reports_for(self, actor: Union[Reporter, NGO]) -> List[RescueReport]:
        if ActorRole(actor.role) == ActorRole.REPORTER:
            return self._reports.list_by_reporter(actor.id)
        return self._reports.list_for_ngo_dashboard(actor.id)

    def reporter_reports(self, reporter_id: str) -> List[RescueReport]:
        return self.reports_for(self._identities.get_by_id(reporter_id, ActorRole.REPORTER))

    def ngo_reports(self, ngo_id: str) -> List[RescueReport]:
        return self.reports_for(self._identities.get_by_id(ngo_id, ActorRole.NGO))

    def report_detail(self, report_id: str) -> ReportDetail:
        report = self._reports.get_by_id(report_id)
        detail = ReportDetail(report=report)
        if self._identities.exists(report.reporter_id, ActorRole.REPORTER):
            detail.reporter = self._identities.get_by_id(report.reporter_id, ActorRole.REPORTER)
        if report.assigned_ngo_id and self._identities.exists(report.assigned_ngo_id, ActorRole.NGO):
            detail.ngo = self._identities.get_by_id(report.assigned_ngo_id, ActorRole.NGO)
        return detail

    def reporter_summary(self, reporter_id: str) -> ReporterSummary:
        reporter = self._identities.get_by_id(reporter_id, ActorRole.REPORTER)
        reports = self._reports.list_by_reporter(reporter_id)
        counts = Counter(r.status for r in reports)
        return ReporterSummary(
            reporter=reporter,
            total_reports=len(reports),
            reports_by_status={status: counts.get(status, 0) for status in ReportStatus},
        )
