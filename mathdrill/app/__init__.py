"""Session orchestration, scheduling, registry and CLI."""
