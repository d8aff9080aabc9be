# sdk/__init__.py
