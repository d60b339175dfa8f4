# persona_chat/knowledge/domains.py
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class KnowledgeSnippet:
    """검색 대상이 되는 페르소나/배경 지식 한 조각 (불변)"""
    id: str
    title: str
    content: str
    type: str = "persona"  # 'project', 'skill', 'experience', 'persona'
    tags: Tuple[str, ...] = field(default_factory=tuple)
    source: Optional[str] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "KnowledgeSnippet":
        """JSON 항목에서 생성"""
        return KnowledgeSnippet(
            id=str(data["id"]),
            title=data.get("title") or str(data["id"]),
            content=data["content"],
            type=data.get("type", "persona"),
            tags=tuple(data.get("tags") or ()),
            source=data.get("source"),
        )


@dataclass(frozen=True)
class ScoredSnippet:
    """검색 결과 - 스니펫과 관련도 점수"""
    snippet: KnowledgeSnippet
    score: float
