"""
Infrastructure Layer - External Systems and State

Contains:
- credentials: provider key pool with rotation and cooldown
- cache: TTL-bounded result page cache
- fallback: offline topic collections
- sources: Google Custom Search image client
"""
