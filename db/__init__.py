"""
db/ - Database Layer
====================
Connection sources, scoped SQL execution, typed errors and schema bootstrap.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
