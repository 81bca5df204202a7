import asyncio
from datetime import timedelta
from typing import List, Tuple

import structlog

from app.core.config import settings
from app.core.time_utils import get_utc_now
from app.schemas.actor import Reporter, NGO
from app.schemas.report import ChatMessage, Geolocation, RescueReport, ReportStatus

logger = structlog.get_logger()

DAY = timedelta(days=1)


def demo_seed_data() -> Tuple[List[Reporter], List[NGO], List[RescueReport]]:
    """
    One reporter, one NGO, one open and one finished case.
    """
    now = get_utc_now()

    reporters = [
        Reporter(id="user1", name="Aarav Sharma", email="aarav@test.com", points=60),
    ]
    ngos = [
        NGO(id="ngo1", name="Animal Angels Rescue", email="ngo@test.com", location="Delhi, India"),
    ]

    reports = [
        RescueReport(
            id="report1",
            reporter_id="user1",
            photo="https://images.unsplash.com/photo-1596854407944-bf87f6fdd49e?w=400&q=80",
            description="A small kitten seems to have hurt its paw. It is hiding under a car near the market.",
            location=Geolocation(latitude=28.6139, longitude=77.2090),
            status=ReportStatus.PENDING,
            assigned_ngo_id=None,
            created_at=now - DAY,
            updated_at=now - DAY,
            conversation=[],
            triage_note=(
                "**AI Analysis:**\n"
                "- **Animal Type:** Domestic Shorthair Kitten.\n"
                "- **Observed Condition:** Limping, favoring right front paw. Possible sprain or minor fracture.\n"
                "- **Urgency:** Moderate.\n"
                "- **First Aid Suggestion:** Do not attempt to move the kitten if it is fearful. "
                "Provide water and wait for the NGO."
            ),
        ),
        RescueReport(
            id="report2",
            reporter_id="user1",
            photo="https://images.unsplash.com/photo-1543466835-00a7907e9de1?w=400&q=80",
            description="Dog with a collar looks lost and is limping badly near the park.",
            location=Geolocation(latitude=28.6315, longitude=77.2167),
            status=ReportStatus.RESCUED,
            assigned_ngo_id="ngo1",
            created_at=now - 2 * DAY,
            updated_at=now - DAY,
            conversation=[
                ChatMessage(
                    id="msg1",
                    sender_id="ngo1",
                    text="We have received the report and a team is on its way. ETA 20 minutes.",
                    timestamp=now - 1.5 * DAY,
                ),
                ChatMessage(
                    id="msg2",
                    sender_id="user1",
                    text="Thank you so much! I will stay nearby and keep an eye on him.",
                    timestamp=now - 1.4 * DAY,
                ),
                ChatMessage(
                    id="msg3",
                    sender_id="ngo1",
                    text="We have the dog. He seems okay, just scared. We will check for a microchip. Thank you for your help!",
                    timestamp=now - DAY,
                ),
            ],
            triage_note=(
                "**AI Analysis:**\n"
                "- **Animal Type:** Mixed-breed dog (Possibly Labrador mix).\n"
                "- **Observed Condition:** Limping on left hind leg. Appears to be a stray but has a collar, "
                "suggesting it may be lost.\n"
                "- **Urgency:** Moderate.\n"
                "- **First Aid Suggestion:** Approach with caution. If the dog is friendly, check the collar for tags. "
                "Provide water."
            ),
        ),
    ]
    return reporters, ngos, reports


async def main():
    """
    Create tables and seed the configured database.
    """
    from app.core.logging import setup_logging
    from app.services.rescue_core import RescueCore

    setup_logging()
    logger.info("db_init_start", database=settings.DATABASE_URL)
    core = await RescueCore.from_database_url(settings.DATABASE_URL)
    await core.startup(seed=True)
    await core.shutdown()
    logger.info("db_init_complete")

if __name__ == "__main__":
    asyncio.run(main())
