"""Errors raised by the collaborator clients (routing, geocoding)."""

from __future__ import annotations


class CollaboratorError(Exception):
    """An external service answered, but not with something we can use."""


class RoutingError(CollaboratorError):
    pass


class LocationNotFound(CollaboratorError):
    def __init__(self, place: str):
        super().__init__(f"Location not found: {place}")
        self.place = place
