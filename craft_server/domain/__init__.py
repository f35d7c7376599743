"""Domain layer (pure logic).

- Keep combination rules, name generation and validation here.
- Avoid I/O: no DB sessions, no HTTP/FastAPI.
- Every function is deterministic for its inputs.
"""
