# persona_chat/prompt/domains.py
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from persona_chat.chat_session.domains import ChatMessage
from persona_chat.knowledge.domains import KnowledgeSnippet

CONTEXT_HEADER = "RELEVANT CONTEXT FROM PORTFOLIO:"
CONTEXT_FOOTER = (
    "Use the above context to provide accurate, specific answers. "
    "If the context doesn't contain relevant information, say so honestly."
)
CONTEXT_SEPARATOR = "\n\n---\n\n"


def format_context(snippets: Sequence[KnowledgeSnippet]) -> str:
    """검색된 스니펫을 프롬프트용 텍스트로 변환"""
    if not snippets:
        return ""
    blocks = [
        f"[Source {i}: {snippet.title} ({snippet.type})]\n{snippet.content}"
        for i, snippet in enumerate(snippets, start=1)
    ]
    return f"{CONTEXT_HEADER}\n{CONTEXT_SEPARATOR.join(blocks)}\n\n{CONTEXT_FOOTER}"


@dataclass(frozen=True)
class Prompt:
    """모델에 보낼 완성된 프롬프트"""
    instructions: str
    user_message: str
    context: Tuple[KnowledgeSnippet, ...] = ()
    history: Tuple[ChatMessage, ...] = ()
    acknowledgement: str = ""

    def system_text(self) -> str:
        context_text = format_context(self.context)
        if not context_text:
            return self.instructions
        return f"{self.instructions}\n\n{context_text}"

    def to_messages(self) -> List[BaseMessage]:
        """LangChain 메시지 목록 (system → primer → history → 현재 메시지)"""
        messages: List[BaseMessage] = [SystemMessage(content=self.system_text())]
        if self.acknowledgement:
            messages.append(AIMessage(content=self.acknowledgement))
        for message in self.history:
            if message.role == "user":
                messages.append(HumanMessage(content=message.content))
            else:
                messages.append(AIMessage(content=message.content))
        messages.append(HumanMessage(content=self.user_message))
        return messages

    def total_chars(self) -> int:
        return sum(len(message.content) for message in self.to_messages())
