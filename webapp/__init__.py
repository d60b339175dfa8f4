# webapp/__init__.py
