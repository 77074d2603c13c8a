"""Domain layer for dentrack application.

Submodules are imported directly (``dentrack.domain.stores`` and so on) to
keep the storage layer free of circular imports through this package.
"""
