"""
Conversation persistence in MongoDB.

Each conversation is one document in the `conversations` collection:
{_id, created_at, messages: [{id, role, content, content_for_llm, references, created_at}]}
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from chatbot_server.schemas.conversation import Conversation, Message, Reference

logger = logging.getLogger(__name__)

CONVERSATIONS_COLLECTION = "conversations"


class MongoDbConversationsService:
    """
    Create, append to and read chat conversations keyed by conversation id.
    """

    def __init__(self, database: Any, collection_name: str = CONVERSATIONS_COLLECTION):
        self.collection = database[collection_name]

    def _generate_id(self) -> str:
        """Generate a new unique conversation/message ID with timestamp."""
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        unique_id = uuid.uuid4().hex[:8]
        return f"{timestamp}_{unique_id}"

    @staticmethod
    def _from_document(doc: Dict[str, Any]) -> Conversation:
        return Conversation(
            id=doc["_id"],
            created_at=doc["created_at"],
            messages=[Message.model_validate(m) for m in doc.get("messages", [])],
        )

    async def create(self) -> Conversation:
        conversation = Conversation(id=f"conv_{self._generate_id()}")
        await self.collection.insert_one({
            "_id": conversation.id,
            "created_at": conversation.created_at,
            "messages": [],
        })
        logger.info(f"Created conversation {conversation.id}")
        return conversation

    async def find_by_id(self, conversation_id: str) -> Optional[Conversation]:
        doc = await self.collection.find_one({"_id": conversation_id})
        if doc is None:
            return None
        return self._from_document(doc)

    async def add_conversation_message(
        self,
        conversation_id: str,
        role: str,
        content: str,
        content_for_llm: Optional[str] = None,
        references: Optional[List[Reference]] = None,
    ) -> Optional[Message]:
        """
        Append a message to a conversation.
        Returns the stored message, or None if the conversation does not exist.
        """
        message = Message(
            id=f"msg_{self._generate_id()}",
            role=role,
            content=content,
            content_for_llm=content_for_llm,
            references=references or [],
        )
        result = await self.collection.update_one(
            {"_id": conversation_id},
            {"$push": {"messages": message.model_dump()}},
        )
        if result.matched_count == 0:
            logger.warning(f"Conversation {conversation_id} not found, message dropped")
            return None
        return message


def recent_history(conversation: Conversation, max_messages: int) -> List[Dict[str, str]]:
    """Last `max_messages` user/assistant turns in LLM message format. Oldest dropped first."""
    turns = [
        {"role": m.role, "content": m.content}
        for m in conversation.messages
        if m.role in ("user", "assistant")
    ]
    if max_messages <= 0:
        return []
    return turns[-max_messages:]
