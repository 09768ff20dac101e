from datetime import datetime
from typing import List, Optional
from pydantic import Field, model_validator

from .base import CamelModel
from ..core.security import UserRole

class MessageResponse(CamelModel):
    id: str
    conversation_id: str
    sender_id: str
    sender_role: UserRole
    text: str
    timestamp: datetime
    read: bool

class ConversationResponse(CamelModel):
    id: str
    patient_id: str
    doctor_id: str
    patient_name: str
    doctor_name: str
    created_at: datetime
    last_message: Optional[str] = None
    timestamp: Optional[datetime] = None
    unread: int = 0

class ConversationListResponse(CamelModel):
    conversations: List[ConversationResponse]

class ConversationEnvelope(CamelModel):
    message: Optional[str] = None
    conversation: ConversationResponse

class MessageListResponse(CamelModel):
    messages: List[MessageResponse]

class SendMessageRequest(CamelModel):
    text: str = Field(..., min_length=1, max_length=2000)
    conversation_id: Optional[str] = None
    recipient_id: Optional[str] = None

    @model_validator(mode="after")
    def check_target(self):
        if not self.conversation_id and not self.recipient_id:
            raise ValueError("Either conversationId or recipientId is required")
        return self

class SendMessageResponse(CamelModel):
    message: str
    data: MessageResponse

class CreateConversationRequest(CamelModel):
    recipient_id: str = Field(..., min_length=1)
