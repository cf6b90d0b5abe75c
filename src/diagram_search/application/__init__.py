"""
Application Layer - Use Cases

Contains:
- search: page client, ranking, query enhancement, suggestions
- session: pagination aggregator
"""
