# webapp/routers/__init__.py
