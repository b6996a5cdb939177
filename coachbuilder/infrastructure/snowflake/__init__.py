"""Snowflake connection management and repositories."""
