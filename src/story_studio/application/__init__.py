"""Application layer — use cases and the pipeline orchestrator."""
