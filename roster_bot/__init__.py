"""Core package for the staff roster bot.

This module exposes the main data models, the rank mapping table and the
storage layer so that consumers of the package can simply import them from
``roster_bot``.
"""

from .core.models import ExternalMember, RankMapping, StaffRecord
from .core.ranks import RankMappingTable
from .core.reconcile import reconcile
from .core.storage import JSONStorage

__all__ = [
    "ExternalMember",
    "RankMapping",
    "StaffRecord",
    "RankMappingTable",
    "reconcile",
    "JSONStorage",
]
