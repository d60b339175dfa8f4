# persona_chat/persona/repository.py
import json
import logging
import re
from pathlib import Path
from typing import Optional

from .domains import PersonaConfig, QuickResponse
from .settings import DEFAULT_PERSONA_FILE

logger = logging.getLogger(__name__)


class PersonaRepository:
    """페르소나 저장소 - 설정 파일이 없거나 깨졌으면 기본 페르소나 사용"""

    def __init__(self, persona: PersonaConfig):
        self._persona = persona
        self._validate_patterns()

    @classmethod
    def from_file(cls, path: Path) -> "PersonaRepository":
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            persona = PersonaConfig.from_dict(data)
            logger.info(f"Persona '{persona.name}' loaded from {path} ({len(persona.quick_responses)} quick responses)")
        except FileNotFoundError:
            logger.warning(f"Persona file not found at {path}, using default persona")
            persona = cls._load_default()
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Invalid persona file {path}: {e}, using default persona")
            persona = cls._load_default()
        return cls(persona)

    @staticmethod
    def _load_default() -> PersonaConfig:
        data = json.loads(DEFAULT_PERSONA_FILE.read_text(encoding="utf-8"))
        return PersonaConfig.from_dict(data)

    def _validate_patterns(self) -> None:
        for quick_response in self._persona.quick_responses:
            re.compile(quick_response.pattern)

    def get_persona(self) -> PersonaConfig:
        return self._persona

    def match_quick_response(self, message: str) -> Optional[QuickResponse]:
        """메시지에 맞는 빠른 답변 조회"""
        return self._persona.match_quick_response(message)
