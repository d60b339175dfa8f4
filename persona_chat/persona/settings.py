# persona_chat/persona/settings.py
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_PERSONA_FILE = Path(__file__).parent / "data" / "persona.json"


class PersonaSettings(BaseSettings):
    """페르소나 설정 파일 위치"""

    PERSONA_FILE: Path = Field(default=DEFAULT_PERSONA_FILE, description="페르소나 JSON 파일")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_ignore_empty": True,
        "extra": "ignore",
    }
