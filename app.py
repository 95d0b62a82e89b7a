"""
app.py - re-exports the application for servers started with "uvicorn app:app".

The application itself lives in ohmage/main.py:
- ohmage/domain/ - Campaign, prompt, condition and survey response model
- ohmage/models/ - Pydantic request models
- ohmage/routes/ - API endpoints organized by resource
- ohmage/services/ - Database access
- ohmage/database/ - Database connection and utilities
- ohmage/utils/ - Request validation and URL helpers
"""

from ohmage.main import app

__all__ = ['app']
