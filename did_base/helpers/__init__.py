"""Configuration and container helpers shared by the engine."""
