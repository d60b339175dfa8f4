# persona_chat/__init__.py
