import unittest

from app.core.exceptions import NotFoundError
from app.schemas.actor import ActorRole
from app.schemas.report import Geolocation, ReportStatus
from app.services.rescue_core import RescueCore
from app.services.persistence import InMemoryPersistence, REPORTS_KEY


class TestReportStore(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.persistence = InMemoryPersistence()
        self.core = RescueCore(self.persistence)
        await self.core.startup(seed=False)
        self.reporter = await self.core.identities.register(ActorRole.REPORTER, "Priya", "priya@example.org")
        self.ngo = await self.core.identities.register(ActorRole.NGO, "Shelter", "shelter@example.org")
        self.location = Geolocation(latitude=28.6, longitude=77.2)

    async def _create(self, description="limping dog", reporter_id=None):
        return await self.core.reports.create(
            reporter_id or self.reporter.id, "photo-data", description, self.location, None
        )

    async def test_create_sets_initial_state(self):
        report = await self._create()

        self.assertEqual(report.status, ReportStatus.PENDING)
        self.assertIsNone(report.assigned_ngo_id)
        self.assertEqual(report.conversation, [])
        self.assertEqual(report.created_at, report.updated_at)
        self.assertEqual(self.core.identities.get_by_id(self.reporter.id, ActorRole.REPORTER).points, 10)

    async def test_create_unknown_reporter(self):
        with self.assertRaises(NotFoundError):
            await self._create(reporter_id="ghost")
        self.assertEqual(self.core.reports.list_all(), [])

    async def test_create_persists_newest_first(self):
        first = await self._create("first")
        second = await self._create("second")

        saved = await self.persistence.load(REPORTS_KEY)
        self.assertEqual([r["id"] for r in saved], [second.id, first.id])

    async def test_get_by_id_is_defensive_copy(self):
        report = await self._create()

        copy = self.core.reports.get_by_id(report.id)
        copy.status = ReportStatus.RESCUED
        copy.conversation.append(None)

        fresh = self.core.reports.get_by_id(report.id)
        self.assertEqual(fresh.status, ReportStatus.PENDING)
        self.assertEqual(fresh.conversation, [])

    async def test_get_by_id_missing(self):
        with self.assertRaises(NotFoundError):
            self.core.reports.get_by_id("nope")

    async def test_list_by_reporter(self):
        other = await self.core.identities.register(ActorRole.REPORTER, "Ravi", "ravi@example.org")
        mine_old = await self._create("old")
        await self._create("theirs", reporter_id=other.id)
        mine_new = await self._create("new")

        ids = [r.id for r in self.core.reports.list_by_reporter(self.reporter.id)]
        self.assertEqual(ids, [mine_new.id, mine_old.id])

    async def test_pending_report_never_listed_by_ngo(self):
        report = await self._create()

        self.assertEqual([r.id for r in self.core.reports.list_pending()], [report.id])
        self.assertEqual(self.core.reports.list_by_ngo(self.ngo.id), [])

    async def test_ngo_dashboard_union(self):
        r1 = await self._create("accepted one")
        await self.core.lifecycle.update_status(r1.id, ReportStatus.ACCEPTED, self.ngo.id)
        r2 = await self._create("pending one")

        other_ngo = await self.core.identities.register(ActorRole.NGO, "Other", "other@example.org")
        r3 = await self._create("someone else's")
        await self.core.lifecycle.update_status(r3.id, ReportStatus.ACCEPTED, other_ngo.id)

        dashboard = self.core.reports.list_for_ngo_dashboard(self.ngo.id)
        self.assertEqual([r.id for r in dashboard], [r2.id, r1.id])
        self.assertEqual([r.id for r in self.core.reports.list_by_ngo(self.ngo.id)], [r1.id])


if __name__ == "__main__":
    unittest.main()
