"""Core services: document store, search, tool gateway, orchestration and shaping."""
