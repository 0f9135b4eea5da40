"""Task routing service for natural-language requests.

This package implements the request pipeline:
- Task intake with PostgreSQL persistence
- Deterministic prompt classification to one of several agents
- Agent execution (deterministic acknowledgement or LLM completion)
- Terminal status bookkeeping with best-effort compensation on failure
- Event emission and Prometheus metrics
"""
