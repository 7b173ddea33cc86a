"""
models/ - Domain Models
=======================
Plain dataclasses passed between repositories and their callers.
"""
