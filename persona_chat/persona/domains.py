# persona_chat/persona/domains.py
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class QuickResponse:
    """패턴 → 미리 준비된 답변"""
    name: str
    pattern: str
    response: str

    def matches(self, message: str) -> bool:
        return re.search(self.pattern, message, flags=re.IGNORECASE) is not None


@dataclass(frozen=True)
class PersonaConfig:
    """페르소나 설정 - 시작 시 로드, 읽기 전용"""
    name: str
    instructions: str
    acknowledgement: str = ""
    default_reply: str = "Sorry, I can't answer right now. Please try again in a moment."
    quick_responses: List[QuickResponse] = field(default_factory=list)

    def match_quick_response(self, message: str) -> Optional[QuickResponse]:
        """표 순서대로 첫 번째로 매칭되는 답변"""
        for quick_response in self.quick_responses:
            if quick_response.matches(message):
                return quick_response
        return None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "PersonaConfig":
        quick_responses = [
            QuickResponse(name=item.get("name", f"quick-{i}"), pattern=item["pattern"], response=item["response"])
            for i, item in enumerate(data.get("quick_responses", []))
        ]
        kwargs = {
            "name": data["name"],
            "instructions": data["instructions"],
            "acknowledgement": data.get("acknowledgement", ""),
            "quick_responses": quick_responses,
        }
        if data.get("default_reply"):
            kwargs["default_reply"] = data["default_reply"]
        return PersonaConfig(**kwargs)
