"""
Tests for the hero platform auth service.

Covered:

- Password hashing and JWT signing (`test_security.py`)
- AuthService flows against an in-memory credential store (`test_auth_service.py`)
- HTTP endpoints through FastAPI's TestClient (`test_auth.py`)
- Database initialization and the SQLAlchemy credential store (`test_db_init.py`)
- Settings validation and audit logging (`test_config.py`, `test_event_logger.py`)
"""
