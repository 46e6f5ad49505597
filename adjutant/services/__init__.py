"""Domain services: planning, the build agent, persistence, scaffolding, settings."""
