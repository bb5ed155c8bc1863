"""
FastAPI REST API Layer for voicegen-ms.

    - routes.py: /api/generate-voice, /health, /metrics
    - schemas.py: Request Pydantic models
    - dependencies.py: FastAPI dependency injection
"""
