from fastapi import APIRouter, Depends, Response, status

from ...api.deps import get_current_user
from ...core.store import Repository, get_store
from ...models import User
from ...schemas.message import (
    ConversationEnvelope, ConversationListResponse, CreateConversationRequest,
    MessageListResponse, MessageResponse, SendMessageRequest, SendMessageResponse
)
from ...services.messaging_service import MessagingService

router = APIRouter(prefix="/messages", tags=["Messages"])

def get_messaging_service(store: Repository = Depends(get_store)) -> MessagingService:
    return MessagingService(store)

@router.get("/conversations", response_model=ConversationListResponse)
async def list_conversations(
    current_user: User = Depends(get_current_user),
    messaging: MessagingService = Depends(get_messaging_service)
):
    """Conversations of the caller, most recent first."""
    return ConversationListResponse(conversations=messaging.list_conversations(current_user))

@router.get("/conversation/{conversation_id}", response_model=MessageListResponse)
async def get_conversation_messages(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    messaging: MessagingService = Depends(get_messaging_service)
):
    messages = messaging.get_messages(current_user, conversation_id)
    return MessageListResponse(messages=[MessageResponse.model_validate(m) for m in messages])

@router.post("/send", response_model=SendMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    request: SendMessageRequest,
    current_user: User = Depends(get_current_user),
    messaging: MessagingService = Depends(get_messaging_service)
):
    """Send to an existing conversation or open one with the recipient."""
    message = messaging.send(
        current_user,
        request.text,
        conversation_id=request.conversation_id,
        recipient_id=request.recipient_id
    )
    return SendMessageResponse(message="Message sent", data=MessageResponse.model_validate(message))

@router.post("/conversation/create", response_model=ConversationEnvelope, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    request: CreateConversationRequest,
    response: Response,
    current_user: User = Depends(get_current_user),
    messaging: MessagingService = Depends(get_messaging_service)
):
    conversation, created = messaging.open_conversation(current_user, request.recipient_id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return ConversationEnvelope(
        message="Conversation created" if created else "Conversation already exists",
        conversation=messaging.describe(conversation, viewer=current_user)
    )
