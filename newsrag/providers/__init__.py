"""Concrete adapters for every interface in :mod:`newsrag.interfaces`."""
