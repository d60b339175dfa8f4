# persona_chat/knowledge/repository.py
import json
import logging
from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from persona_chat.exceptions import KnowledgeLoadException
from .domains import KnowledgeSnippet

logger = logging.getLogger(__name__)


class KnowledgeRepository:
    """지식 스니펫 저장소 - 시작 시 한 번 로드되고 이후 읽기 전용"""

    def __init__(self, snippets: Iterable[KnowledgeSnippet] = ()):
        # 같은 id가 다시 나오면 기존 위치에서 교체 (삽입 순서 유지)
        ordered: Dict[str, KnowledgeSnippet] = {}
        for snippet in snippets:
            ordered[snippet.id] = snippet
        self._snippets: tuple = tuple(ordered.values())
        self._by_id: Dict[str, KnowledgeSnippet] = dict(ordered)

    @classmethod
    def from_file(cls, path: Path) -> "KnowledgeRepository":
        """JSON 파일({"snippets": [...]})에서 로드"""
        path = Path(path)
        if not path.exists():
            logger.warning(f"Knowledge file not found at {path}, starting with an empty store")
            return cls()

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            snippets = [KnowledgeSnippet.from_dict(item) for item in data.get("snippets", [])]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise KnowledgeLoadException(f"Failed to load knowledge file {path}: {e}") from e

        repository = cls(snippets)
        logger.info(f"Knowledge base loaded: {repository.count()} snippets from {path}")
        return repository

    def all(self) -> List[KnowledgeSnippet]:
        """삽입 순서대로 전체 스니펫"""
        return list(self._snippets)

    def get(self, snippet_id: str) -> Optional[KnowledgeSnippet]:
        return self._by_id.get(snippet_id)

    def count(self) -> int:
        return len(self._snippets)

    def summary(self) -> Dict[str, object]:
        """타입별 스니펫 개수"""
        by_type = Counter(snippet.type for snippet in self._snippets)
        return {"total": self.count(), "by_type": dict(by_type)}
