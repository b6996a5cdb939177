"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- snowflake: Access code directory and plan log persistence
- pdf: Rasterizing plan documents and writing A4 PDFs

These wrappers translate between external formats and our domain models.
"""
