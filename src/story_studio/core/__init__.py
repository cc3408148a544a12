"""Core services — configuration, logging, DI container and timing."""
