"""
Core business logic for the coach builder.

This package is framework-agnostic - it doesn't import FastAPI, Snowflake,
or any rendering library. Validation, nutrition math, plan builders and
commission reporting can be tested in isolation.
"""
