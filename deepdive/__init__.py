"""
Deep Dive Backend Package.

FastAPI service for comparative tiering and drill-down analysis of ad
publisher performance between two periods.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, errors and dependencies
    - models: Pydantic schemas, enums and perspective metadata
    - services: Pipeline stages, orchestrator and collaborators
    - sql: Parameterized BigQuery queries
"""

__version__ = "1.0.0"
