# enrollment_service/__init__.py
