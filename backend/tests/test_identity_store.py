import unittest

from app.core.exceptions import DuplicateAccountError, NotFoundError
from app.schemas.actor import ActorRole
from app.services.identity_store import IdentityStore
from app.services.persistence import InMemoryPersistence, USERS_KEY, NGOS_KEY


class TestIdentityStore(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.persistence = InMemoryPersistence()
        self.store = IdentityStore(self.persistence)
        await self.store.load()

    async def test_register_reporter_starts_with_zero_points(self):
        reporter = await self.store.register(ActorRole.REPORTER, "Priya", "priya@example.org")

        self.assertEqual(reporter.points, 0)
        self.assertEqual(reporter.role, ActorRole.REPORTER)
        self.assertTrue(reporter.id.startswith("id_"))
        saved = await self.persistence.load(USERS_KEY)
        self.assertEqual(saved[0]["email"], "priya@example.org")

    async def test_register_ngo_location_defaults(self):
        ngo = await self.store.register(ActorRole.NGO, "Paws Trust", "paws@example.org")
        self.assertEqual(ngo.location, "N/A")

        other = await self.store.register(ActorRole.NGO, "Tails", "tails@example.org", {"location": "Pune, India"})
        self.assertEqual(other.location, "Pune, India")
        self.assertEqual(len(await self.persistence.load(NGOS_KEY)), 2)

    async def test_duplicate_email_is_case_insensitive_within_role(self):
        await self.store.register(ActorRole.REPORTER, "Priya", "priya@example.org")

        with self.assertRaises(DuplicateAccountError):
            await self.store.register(ActorRole.REPORTER, "Other", "PRIYA@Example.org")

    async def test_same_email_allowed_across_roles(self):
        reporter = await self.store.register(ActorRole.REPORTER, "Priya", "shared@example.org")
        ngo = await self.store.register(ActorRole.NGO, "Shelter", "shared@example.org")
        self.assertNotEqual(reporter.id, ngo.id)

    async def test_authenticate(self):
        ngo = await self.store.register(ActorRole.NGO, "Shelter", "shelter@example.org")

        found = await self.store.authenticate(ActorRole.NGO, "Shelter@Example.org", "anything")
        self.assertEqual(found.id, ngo.id)

        with self.assertRaises(NotFoundError):
            await self.store.authenticate(ActorRole.REPORTER, "shelter@example.org")

    async def test_custom_credential_verifier_rejects(self):
        store = IdentityStore(InMemoryPersistence(), lambda actor, password: password == "secret")
        await store.register(ActorRole.REPORTER, "Priya", "priya@example.org")

        with self.assertRaises(NotFoundError):
            await store.authenticate(ActorRole.REPORTER, "priya@example.org", "wrong")
        found = await store.authenticate(ActorRole.REPORTER, "priya@example.org", "secret")
        self.assertEqual(found.name, "Priya")

    async def test_get_by_id_returns_copy(self):
        reporter = await self.store.register(ActorRole.REPORTER, "Priya", "priya@example.org")

        copy = self.store.get_by_id(reporter.id, ActorRole.REPORTER)
        copy.points = 999
        self.assertEqual(self.store.get_by_id(reporter.id, ActorRole.REPORTER).points, 0)

        with self.assertRaises(NotFoundError):
            self.store.get_by_id(reporter.id, ActorRole.NGO)

    async def test_award_points(self):
        reporter = await self.store.register(ActorRole.REPORTER, "Priya", "priya@example.org")

        await self.store.award_points(reporter.id, 10)
        await self.store.award_points(reporter.id, 50)

        self.assertEqual(self.store.get_by_id(reporter.id, ActorRole.REPORTER).points, 60)
        saved = await self.persistence.load(USERS_KEY)
        self.assertEqual(saved[0]["points"], 60)

    async def test_award_points_unknown_reporter_is_noop(self):
        await self.store.award_points("missing", 10)
        self.assertTrue(self.store.is_empty())

    async def test_load_restores_accounts(self):
        reporter = await self.store.register(ActorRole.REPORTER, "Priya", "priya@example.org")

        reloaded = IdentityStore(self.persistence)
        await reloaded.load()
        self.assertEqual(reloaded.get_by_id(reporter.id, ActorRole.REPORTER).email, "priya@example.org")


if __name__ == "__main__":
    unittest.main()
