# persona_chat/persona/__init__.py
from .domains import PersonaConfig, QuickResponse
from .repository import PersonaRepository
from .container import create_persona_container

__all__ = ["PersonaConfig", "QuickResponse", "PersonaRepository", "create_persona_container"]
