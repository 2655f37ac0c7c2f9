"""Deployment edge: configuration, logging, PostgreSQL record store and the FastAPI app."""
