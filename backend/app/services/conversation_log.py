"""
Conversation Log - append-only message thread per report.
"""

from typing import List

import structlog

from app.core.exceptions import EmptyMessageError
from app.core.time_utils import bump, get_utc_now
from app.schemas.report import ChatMessage
from app.services.case_service import CaseService
from app.services.report_store import ReportStore

logger = structlog.get_logger()


class ConversationLog:

    def __init__(self, reports: ReportStore):
        self._reports = reports

    async def append_message(self, report_id: str, sender_id: str, text: str) -> ChatMessage:
        text = (text or "").strip()

        async with self._reports.locked(report_id) as report:
            if not text:
                raise EmptyMessageError("Message cannot be empty.")
            message = ChatMessage(
                id=CaseService.generate_id({m.id for m in report.conversation}),
                sender_id=sender_id,
                text=text,
                timestamp=get_utc_now(),
            )
            report.conversation.append(message)
            report.updated_at = bump(report.updated_at)
            await self._reports.persist()

        logger.info("message_appended", report_id=report_id, sender_id=sender_id, message_id=message.id)
        return message.model_copy(deep=True)

    def list_messages(self, report_id: str) -> List[ChatMessage]:
        return self._reports.get_by_id(report_id).conversation
