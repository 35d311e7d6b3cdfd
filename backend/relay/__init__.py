"""Relay Backend Application.

A content publishing backend that stores versioned posts and exports
published ones as markdown artifacts into a static-site workspace.

Modules:
    - config: Application configuration management
    - database: Async engine and session management
    - models: SQLAlchemy models and Pydantic schemas
    - services: Content store, tag registry and publishing workflow
    - publishing: Artifact rendering, git sync and webhook notification
    - tasks: Background maintenance (session cleanup)
    - middleware: Exception taxonomy and error handlers
    - main: FastAPI application entry point
"""

__version__ = "1.0.0"
__author__ = "Relay Team"
