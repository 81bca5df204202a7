import base64
import unittest
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from app.main import app
from app.services.persistence import InMemoryPersistence
from app.services.rescue_core import RescueCore

API = "/api/v1"
PHOTO = base64.b64encode(b"fake-image").decode()


class FakeTriage:
    analyze = AsyncMock(return_value="**AI Analysis:** kitten, low urgency")


class TestRescueApi(unittest.TestCase):
    """
    Runs against the demo seed: reporter user1 (60 points), NGO ngo1,
    pending report1 and rescued report2.
    """

    def setUp(self):
        app.state.core = RescueCore(InMemoryPersistence(), triage=FakeTriage())
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_register_and_login(self):
        response = self.client.post(f"{API}/auth/register", json={
            "role": "NGO", "name": "Paws Trust", "email": "paws@example.org", "password": "x",
        })
        self.assertEqual(response.status_code, 201)
        ngo = response.json()
        self.assertEqual(ngo["location"], "N/A")

        duplicate = self.client.post(f"{API}/auth/register", json={
            "role": "NGO", "name": "Again", "email": "PAWS@example.org",
        })
        self.assertEqual(duplicate.status_code, 409)

        login = self.client.post(f"{API}/auth/login", json={"role": "NGO", "email": "paws@example.org"})
        self.assertEqual(login.status_code, 200)
        self.assertEqual(login.json()["id"], ngo["id"])

        missing = self.client.post(f"{API}/auth/login", json={"role": "USER", "email": "paws@example.org"})
        self.assertEqual(missing.status_code, 404)

    def test_read_actor(self):
        response = self.client.get(f"{API}/auth/USER/user1")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["points"], 60)
        self.assertEqual(self.client.get(f"{API}/auth/NGO/user1").status_code, 404)

    def test_full_rescue_flow(self):
        created = self.client.post(f"{API}/reports", json={
            "reporter_id": "user1",
            "photo": PHOTO,
            "mime_type": "image/png",
            "description": "limping dog",
            "location": {"latitude": 28.6, "longitude": 77.2},
        })
        self.assertEqual(created.status_code, 201)
        report = created.json()
        self.assertEqual(report["status"], "Pending")
        self.assertEqual(report["triage_note"], "**AI Analysis:** kitten, low urgency")
        report_id = report["id"]

        dashboard = self.client.get(f"{API}/admin/reports/ngo/ngo1").json()
        self.assertEqual([r["id"] for r in dashboard][:2], [report_id, "report1"])

        accepted = self.client.post(f"{API}/admin/reports/{report_id}/status", json={"status": "Accepted", "ngo_id": "ngo1"})
        self.assertEqual(accepted.status_code, 200)
        self.assertEqual(accepted.json()["assigned_ngo_id"], "ngo1")

        message = self.client.post(f"{API}/reports/{report_id}/messages", json={"sender_id": "ngo1", "text": "On our way"})
        self.assertEqual(message.status_code, 201)

        rescued = self.client.post(f"{API}/admin/reports/{report_id}/status", json={"status": "Rescued", "ngo_id": "ngo1"})
        self.assertEqual(rescued.json()["status"], "Rescued")

        summary = self.client.get(f"{API}/reports/by-reporter/user1/summary").json()
        self.assertEqual(summary["reporter"]["points"], 120)
        self.assertEqual(summary["total_reports"], 3)

        detail = self.client.get(f"{API}/reports/{report_id}/detail").json()
        self.assertEqual(detail["ngo"]["name"], "Animal Angels Rescue")
        self.assertEqual([m["text"] for m in detail["report"]["conversation"]], ["On our way"])

    def test_error_mapping(self):
        self.assertEqual(self.client.get(f"{API}/reports/missing").status_code, 404)

        invalid = self.client.post(f"{API}/admin/reports/report1/status", json={"status": "In Progress", "ngo_id": "ngo1"})
        self.assertEqual(invalid.status_code, 409)

        self.client.post(f"{API}/auth/register", json={"role": "NGO", "name": "N2", "email": "n2@example.org"})
        other = self.client.post(f"{API}/auth/login", json={"role": "NGO", "email": "n2@example.org"}).json()
        self.client.post(f"{API}/admin/reports/report1/status", json={"status": "Accepted", "ngo_id": "ngo1"})
        forbidden = self.client.post(f"{API}/admin/reports/report1/status", json={"status": "Rescued", "ngo_id": other["id"]})
        self.assertEqual(forbidden.status_code, 403)

        empty = self.client.post(f"{API}/reports/report1/messages", json={"sender_id": "user1", "text": "   "})
        self.assertEqual(empty.status_code, 422)
        self.assertEqual(empty.json()["detail"], "Message cannot be empty.")

    def test_location_validation(self):
        response = self.client.post(f"{API}/reports", json={
            "reporter_id": "user1",
            "photo": PHOTO,
            "description": "dog",
            "location": {"latitude": 128.6, "longitude": 77.2},
        })
        self.assertEqual(response.status_code, 422)

    def test_close_and_list_all(self):
        closed = self.client.post(f"{API}/admin/reports/report2/close")
        self.assertEqual(closed.json()["status"], "Closed")
        self.assertEqual(self.client.post(f"{API}/admin/reports/report2/close").status_code, 409)

        all_reports = self.client.get(f"{API}/admin/reports/").json()
        self.assertEqual([r["id"] for r in all_reports], ["report1", "report2"])

    def test_report_paging(self):
        page = self.client.get(f"{API}/admin/reports/", params={"skip": 1, "limit": 1}).json()
        self.assertEqual([r["id"] for r in page], ["report2"])

        self.assertEqual(self.client.get(f"{API}/admin/reports/", params={"skip": -1}).status_code, 422)
        self.assertEqual(self.client.get(f"{API}/admin/reports/", params={"limit": 0}).status_code, 422)

    def test_messages_listing(self):
        messages = self.client.get(f"{API}/reports/report2/messages").json()
        self.assertEqual([m["id"] for m in messages], ["msg1", "msg2", "msg3"])


if __name__ == "__main__":
    unittest.main()
