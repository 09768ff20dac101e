from dataclasses import dataclass, field
from datetime import datetime

from ..core.security import UserRole

@dataclass
class Conversation:
    id: str
    patient_id: str
    doctor_id: str
    created_at: datetime = field(default_factory=datetime.utcnow)

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.patient_id, self.doctor_id)

@dataclass
class Message:
    id: str
    conversation_id: str
    sender_id: str
    sender_role: UserRole
    text: str
    timestamp: datetime = field(default_factory=datetime.utcnow)
    read: bool = False
