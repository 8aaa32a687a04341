"""
Infrastructure Layer - External Systems Integration

Contains:
- store: resource store contract, in-memory query evaluation, seed loading
- cache: key/value persistence for client state
- remote: remote search client (httpx + tenacity)
"""
