"""Pydantic data models: blueprint, agent state, provider settings."""
