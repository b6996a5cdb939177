"""
Coach Builder - workout and meal plan builder for fitness coaches.

This package contains the complete application:
- core: Framework-agnostic business logic (validation, nutrition, builders, reporting)
- infrastructure: External service integrations (Snowflake, PDF rendering)
- api: FastAPI routes and dependencies
- client: API wrapper, local session storage and the command line interface
- config: Application configuration
"""

__version__ = "0.1.0"
