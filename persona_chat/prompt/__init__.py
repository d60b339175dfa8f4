# persona_chat/prompt/__init__.py
from .domains import Prompt, format_context
from .assembler import PromptAssembler

__all__ = ["Prompt", "PromptAssembler", "format_context"]
