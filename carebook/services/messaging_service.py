from typing import List, Optional, Tuple
import logging

from ..core.errors import AuthorizationError, NotFoundError, ValidationError
from ..core.security import UserRole
from ..models import Conversation, Message, User
from ..schemas.message import ConversationResponse

logger = logging.getLogger(__name__)

class MessagingService:
    def __init__(self, store):
        self.store = store

    def list_conversations(self, user: User) -> List[ConversationResponse]:
        """Conversations of a user, most recent activity first."""
        summaries = [self.describe(c, viewer=user) for c in self.store.conversations_for(user.id)]
        summaries.sort(key=lambda s: s.timestamp or s.created_at, reverse=True)
        return summaries

    def get_messages(self, user: User, conversation_id: str) -> List[Message]:
        """Messages of a conversation; marks the other party's messages read."""
        conversation = self._get_conversation(user, conversation_id)
        messages = self.store.messages_for(conversation.id)
        for message in messages:
            if message.sender_id != user.id:
                message.read = True
        return messages

    def open_conversation(self, user: User, recipient_id: str) -> Tuple[Conversation, bool]:
        """Existing conversation with a recipient, or a new one. Flag tells which."""
        recipient = self.store.get_user(recipient_id)
        if not recipient or not recipient.is_active:
            raise NotFoundError("Recipient not found")
        if recipient.role == user.role:
            raise ValidationError("Conversations are between a patient and a doctor")

        if user.role == UserRole.PATIENT:
            patient_id, doctor_id = user.id, recipient.id
        else:
            patient_id, doctor_id = recipient.id, user.id

        existing = self.store.find_conversation(patient_id, doctor_id)
        if existing:
            return existing, False

        conversation = self.store.add_conversation(Conversation(
            id=self.store.next_id(),
            patient_id=patient_id,
            doctor_id=doctor_id,
        ))
        logger.info(f"Conversation {conversation.id} created between {patient_id} and {doctor_id}")
        return conversation, True

    def send(
        self,
        user: User,
        text: str,
        conversation_id: Optional[str] = None,
        recipient_id: Optional[str] = None
    ) -> Message:
        if conversation_id:
            conversation = self._get_conversation(user, conversation_id)
        else:
            conversation, _ = self.open_conversation(user, recipient_id)

        message = self.store.add_message(Message(
            id=self.store.next_id(),
            conversation_id=conversation.id,
            sender_id=user.id,
            sender_role=user.role,
            text=text,
        ))
        logger.info(f"Message {message.id} sent in conversation {conversation.id}")
        return message

    def describe(self, conversation: Conversation, viewer: Optional[User] = None) -> ConversationResponse:
        patient = self.store.get_user(conversation.patient_id)
        doctor = self.store.get_user(conversation.doctor_id)
        messages = self.store.messages_for(conversation.id)
        last = messages[-1] if messages else None

        unread = 0
        if viewer is not None:
            unread = sum(1 for m in messages if m.sender_id != viewer.id and not m.read)

        return ConversationResponse(
            id=conversation.id,
            patient_id=conversation.patient_id,
            doctor_id=conversation.doctor_id,
            patient_name=patient.full_name if patient else "Unknown Patient",
            doctor_name=f"Dr. {doctor.full_name}" if doctor else "Unknown Doctor",
            created_at=conversation.created_at,
            last_message=last.text if last else "",
            timestamp=last.timestamp if last else conversation.created_at,
            unread=unread,
        )

    def _get_conversation(self, user: User, conversation_id: str) -> Conversation:
        conversation = self.store.get_conversation(conversation_id)
        if not conversation:
            raise NotFoundError("Conversation not found")
        if not conversation.has_participant(user.id):
            raise AuthorizationError("You are not a participant of this conversation")
        return conversation
