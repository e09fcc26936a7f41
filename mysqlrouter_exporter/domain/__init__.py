"""
Domain Layer - Router Snapshots

This layer contains:
- Entities: read-only snapshots of router state fetched once per cycle
- Exceptions: the domain exception base

No external dependencies allowed in this layer.
"""
