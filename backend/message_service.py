# backend/message_service.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ai_service import AIService
from errors import ValidationError
from models import Message, utcnow
from schemas import MessageCreate, AssistantTurnRequest

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
ASSISTANT_CHAT_ID = "ai-assistant"
ASSISTANT_NAME = "AI Assistant"


class MessageService:
    """Append-only message log, partitioned by chat id"""

    def __init__(self, db: Session):
        self.db = db

    def list(self, chat_id: Optional[str], limit: int = DEFAULT_LIMIT) -> List[Message]:
        if not chat_id:
            raise ValidationError("chatId is required")
        if limit < 1:
            raise ValidationError("limit must be a positive integer")

        # Newest first so the limit keeps the most recent messages
        recent_messages = self.db.query(Message).filter(
            Message.chat_id == chat_id
        ).order_by(Message.timestamp.desc()).limit(limit).all()

        return sorted(recent_messages, key=lambda m: m.timestamp)

    def send(self, data: MessageCreate) -> Message:
        if not data.chat_id or not data.sender_id or not data.content:
            raise ValidationError("Missing required fields")

        message = Message(
            chat_id=data.chat_id,
            sender_id=data.sender_id,
            sender_name=data.sender_name or "",
            receiver_id=data.receiver_id or "",
            receiver_name=data.receiver_name or "",
            content=data.content,
            type=data.type or "text",
            is_ai=data.is_ai,
            timestamp=utcnow(),
            read=False
        )
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        logger.info(f"Message {message.id} stored in chat {message.chat_id}")
        return message

    async def ask_assistant(self, request: AssistantTurnRequest, ai_service: AIService) -> List[Message]:
        """
        One turn with the assistant: store the user's message, ask the
        assistant, store its reply. Returns both messages in order.
        """
        if not request.sender_id or not request.content:
            raise ValidationError("Missing required fields")

        # Validation and credential errors surface before anything is written
        ai_service.check_request(request.content, "Message is required")

        user_message = await run_in_threadpool(self.send, MessageCreate(
            chat_id=request.chat_id,
            sender_id=request.sender_id,
            sender_name=request.sender_name,
            receiver_id=ASSISTANT_CHAT_ID,
            receiver_name=ASSISTANT_NAME,
            content=request.content,
        ))

        reply = await ai_service.chat(request.content, request.context)

        ai_message = await run_in_threadpool(self.send, MessageCreate(
            chat_id=request.chat_id,
            sender_id=ASSISTANT_CHAT_ID,
            sender_name=ASSISTANT_NAME,
            receiver_id=request.sender_id,
            receiver_name=request.sender_name,
            content=reply,
            is_ai=True,
        ))
        return [user_message, ai_message]
