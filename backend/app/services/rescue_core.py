"""
Rescue Core - wires the stores over one persistence backend.

Lifecycle:
1. build (from_database_url or with an explicit Persistence)
2. startup(): load every collection, seed demo data if all are empty
3. serve commands and queries
4. shutdown(): flush collections and release the backend
"""

import base64
import binascii
from typing import Optional

import structlog

from app.core.config import settings
from app.schemas.actor import ActorRole
from app.schemas.report import Geolocation, RescueReport
from app.services.ai_service import TriageService, FALLBACK_ANALYSIS
from app.services.conversation_log import ConversationLog
from app.services.dashboard import DashboardService
from app.services.identity_store import IdentityStore, CredentialVerifier, accept_any_credentials
from app.services.lifecycle_engine import LifecycleEngine
from app.services.persistence import Persistence, SqlPersistence
from app.services.report_store import ReportStore

logger = structlog.get_logger()


class RescueCore:

    def __init__(
        self,
        persistence: Persistence,
        triage=TriageService,
        credential_verifier: CredentialVerifier = accept_any_credentials,
    ):
        self.persistence = persistence
        self.triage = triage
        self.identities = IdentityStore(persistence, credential_verifier)
        self.reports = ReportStore(persistence, self.identities)
        self.lifecycle = LifecycleEngine(self.reports, self.identities)
        self.conversations = ConversationLog(self.reports)
        self.dashboard = DashboardService(self.identities, self.reports)

    @classmethod
    async def from_database_url(cls, db_url: str, **kwargs) -> "RescueCore":
        from app.db.session import build_engine, build_session_factory, init_models

        engine = build_engine(db_url)
        await init_models(engine)
        return cls(SqlPersistence(build_session_factory(engine), engine=engine), **kwargs)

    async def startup(self, seed: Optional[bool] = None):
        await self.identities.load()
        await self.reports.load()

        seed = settings.SEED_DEMO_DATA if seed is None else seed
        if seed and self.persistence.load_failed():
            logger.warning("seeding_skipped", reason="load_failed")
        elif seed and self.identities.is_empty() and self.reports.is_empty():
            from app.db.init_db import demo_seed_data

            logger.info("seeding_demo_data")
            reporters, ngos, reports = demo_seed_data()
            await self.identities.seed(reporters, ngos)
            await self.reports.seed(reports)

    async def shutdown(self):
        await self.identities.flush()
        await self.reports.persist()
        await self.persistence.close()

    async def submit_report(
        self,
        reporter_id: str,
        photo: str,
        description: str,
        location: Geolocation,
        mime_type: str = "image/jpeg",
    ) -> RescueReport:
        """
        Triage the photo, then create the report.
        The photo is stored as given; only base64 payloads are sent to the AI.
        """
        # Fail before paying for an AI call
        self.identities.get_by_id(reporter_id, ActorRole.REPORTER)

        encoded = photo
        if photo.startswith("data:") and "," in photo:
            # data:<mime>;base64,<payload>
            header, encoded = photo.split(",", 1)
            mime_type = header[len("data:"):].split(";", 1)[0] or mime_type
        # Wrapped base64 carries line breaks
        encoded = "".join(encoded.split())

        try:
            photo_bytes = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            photo_bytes = None

        if photo_bytes:
            try:
                triage_note = await self.triage.analyze(photo_bytes, mime_type, description)
            except Exception as e:
                logger.error("triage_failed", error=str(e))
                triage_note = FALLBACK_ANALYSIS
        else:
            logger.info("triage_skipped", reason="photo_not_base64")
            triage_note = None

        return await self.reports.create(reporter_id, photo, description, location, triage_note)
