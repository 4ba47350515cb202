"""Collaborators that talk to the build service."""
