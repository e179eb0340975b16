"""Core domain layer - entities, interfaces, and exceptions."""

from carestock.core import entities, exceptions, interfaces

__all__ = ["entities", "interfaces", "exceptions"]
