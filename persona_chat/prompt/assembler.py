# persona_chat/prompt/assembler.py
import logging
from dataclasses import replace
from typing import Sequence

from persona_chat.chat_session.domains import ChatMessage
from persona_chat.knowledge.domains import KnowledgeSnippet
from persona_chat.persona.domains import PersonaConfig
from .domains import Prompt

logger = logging.getLogger(__name__)


class PromptAssembler:
    """페르소나 + 검색 컨텍스트 + 최근 대화 + 사용자 메시지 → Prompt"""

    def __init__(self, max_history_messages: int = 10, max_prompt_chars: int = 12000):
        self._max_history_messages = max_history_messages
        self._max_prompt_chars = max_prompt_chars

    def assemble(
        self,
        persona: PersonaConfig,
        context: Sequence[KnowledgeSnippet],
        history: Sequence[ChatMessage],
        user_message: str,
    ) -> Prompt:
        recent = tuple(history)[-self._max_history_messages:] if self._max_history_messages else ()
        prompt = Prompt(
            instructions=persona.instructions,
            user_message=user_message,
            context=tuple(context),
            history=recent,
            acknowledgement=persona.acknowledgement,
        )
        return self._fit_budget(prompt)

    def _fit_budget(self, prompt: Prompt) -> Prompt:
        # 지시문과 현재 메시지는 절대 자르지 않는다
        size = prompt.total_chars()
        if size <= self._max_prompt_chars:
            return prompt

        while size > self._max_prompt_chars and prompt.history:
            prompt = replace(prompt, history=prompt.history[1:])
            size = prompt.total_chars()

        while size > self._max_prompt_chars and prompt.context:
            prompt = replace(prompt, context=prompt.context[:-1])
            size = prompt.total_chars()

        if size > self._max_prompt_chars:
            logger.warning(f"Prompt still over budget after trimming: {size} > {self._max_prompt_chars} chars")
        else:
            logger.info(
                f"Prompt trimmed to {size} chars "
                f"(history={len(prompt.history)}, context={len(prompt.context)})"
            )
        return prompt
