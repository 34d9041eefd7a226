from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional

from chatbot_server.schemas.content import EmbeddedContent
from chatbot_server.schemas.conversation import Conversation, Reference
from chatbot_server.services.find_content import FindContentPipeline

CHUNK_SEPARATOR = "~~~~~~"

SYSTEM_PROMPT: Dict[str, str] = {
    "role": "system",
    "content": (
        "You are an assistant to users of the MongoDB Chatbot Framework.\n"
        "Answer their questions about the framework in a friendly conversational tone.\n"
        "Format your answers in Markdown.\n"
        "Be concise in your answers.\n"
        "If you do not know the answer to the question based on the information provided,\n"
        "respond: \"I'm sorry, I don't know the answer to that question. "
        "Please try to rephrase it. Refer to the below information to see if it helps.\""
    ),
}

MakeUserMessage = Callable[[List[EmbeddedContent], str], Dict[str, str]]


def make_user_message(content: List[EmbeddedContent], original_user_message: str) -> Dict[str, str]:
    """
    Create the user message sent to the LLM from retrieved chunks and the query.

    The "Information:" section is always present, empty when nothing was found.
    """
    context = f"\n{CHUNK_SEPARATOR}\n".join(c.text for c in content)

    prompt = f"""Using the following information, answer the user query.
Different pieces of information are separated by "{CHUNK_SEPARATOR}".

Information:
{context}


User query: {original_user_message}"""

    return {"role": "user", "content": prompt}


@dataclass
class UserPrompt:
    user_message: Dict[str, str]
    references: List[Reference] = field(default_factory=list)
    reject_query: bool = False


GenerateUserPrompt = Callable[[str, Optional[Conversation]], Awaitable[UserPrompt]]


def _references(content: List[EmbeddedContent]) -> List[Reference]:
    """One reference per source URL, in retrieval order."""
    seen = set()
    references = []
    for chunk in content:
        if not chunk.url or chunk.url in seen:
            continue
        seen.add(chunk.url)
        title = chunk.metadata.get("pageTitle") or chunk.source_name or chunk.url
        references.append(Reference(url=chunk.url, title=title))
    return references


def make_rag_generate_user_prompt(
    find_content: FindContentPipeline,
    make_user_message: MakeUserMessage = make_user_message,
) -> GenerateUserPrompt:
    async def generate_user_prompt(
        user_message_text: str,
        conversation: Optional[Conversation] = None,
    ) -> UserPrompt:
        found = await find_content(user_message_text)
        if found.rejected:
            return UserPrompt(
                user_message={"role": "user", "content": user_message_text},
                reject_query=True,
            )
        return UserPrompt(
            user_message=make_user_message(found.content, user_message_text),
            references=_references(found.content),
        )

    return generate_user_prompt
