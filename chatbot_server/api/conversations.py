import logging
from dataclasses import dataclass
from typing import Dict

from fastapi import APIRouter, HTTPException
from pymongo.errors import PyMongoError

from chatbot_server.core.config import MAX_HISTORY_MESSAGES
from chatbot_server.core.errors import AdapterError
from chatbot_server.schemas.conversation import (
    ConversationResponse,
    Message,
    MessageRequest,
    MessageResponse,
)
from chatbot_server.services.adapters import ChatLlm
from chatbot_server.services.conversations import MongoDbConversationsService, recent_history
from chatbot_server.services.prompting import GenerateUserPrompt

logger = logging.getLogger(__name__)

REJECT_QUERY_CONTENT = "Sorry, I can't help you with that. Please try asking a different question."


@dataclass
class ConversationsRouterConfig:
    llm: ChatLlm
    conversations: MongoDbConversationsService
    generate_user_prompt: GenerateUserPrompt
    system_prompt: Dict[str, str]
    max_history_messages: int = MAX_HISTORY_MESSAGES


def _to_response(message: Message) -> MessageResponse:
    return MessageResponse(
        id=message.id,
        role=message.role,
        content=message.content,
        references=message.references,
        created_at=message.created_at,
    )


def make_conversations_router(config: ConversationsRouterConfig) -> APIRouter:
    router = APIRouter()

    @router.post("/conversations", response_model=ConversationResponse)
    async def create_conversation():
        """Start a new, empty conversation."""
        conversation = await config.conversations.create()
        return ConversationResponse(id=conversation.id, created_at=conversation.created_at)

    @router.get("/conversations/{conversation_id}", response_model=ConversationResponse)
    async def get_conversation(conversation_id: str):
        conversation = await config.conversations.find_by_id(conversation_id)
        if conversation is None:
            raise HTTPException(status_code=404, detail=f"Conversation {conversation_id} not found")
        return ConversationResponse(
            id=conversation.id,
            created_at=conversation.created_at,
            messages=[_to_response(m) for m in conversation.messages if m.role != "system"],
        )

    @router.post("/conversations/{conversation_id}/messages", response_model=MessageResponse)
    async def add_message(conversation_id: str, req: MessageRequest):
        """
        Answer a user message with RAG.

        - Retrieves content for the message and builds the LLM prompt
        - Sends system prompt + recent history + prompt to the LLM
        - Stores both the user message and the assistant reply
        """
        conversation = await config.conversations.find_by_id(conversation_id)
        if conversation is None:
            raise HTTPException(status_code=404, detail=f"Conversation {conversation_id} not found")

        try:
            user_prompt = await config.generate_user_prompt(req.message, conversation)

            if user_prompt.reject_query:
                answer = {"role": "assistant", "content": REJECT_QUERY_CONTENT}
            else:
                messages = [
                    config.system_prompt,
                    *recent_history(conversation, config.max_history_messages),
                    user_prompt.user_message,
                ]
                answer = await config.llm.answer_question_awaited(messages)
        except AdapterError as e:
            logger.error(f"[Conversations] Model call failed for {conversation_id}: {e}", exc_info=True)
            raise HTTPException(status_code=502, detail=str(e)) from e
        except PyMongoError as e:
            logger.error(f"[Conversations] Content search failed for {conversation_id}: {e}", exc_info=True)
            raise HTTPException(status_code=503, detail="Content store unavailable") from e

        await config.conversations.add_conversation_message(
            conversation_id,
            role="user",
            content=req.message,
            content_for_llm=user_prompt.user_message["content"],
        )
        assistant_message = await config.conversations.add_conversation_message(
            conversation_id,
            role="assistant",
            content=answer["content"],
            references=user_prompt.references,
        )
        if assistant_message is None:
            raise HTTPException(status_code=404, detail=f"Conversation {conversation_id} not found")

        logger.info(
            f"Answered message in {conversation_id} with {len(user_prompt.references)} references"
        )
        return _to_response(assistant_message)

    return router
