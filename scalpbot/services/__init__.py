"""
Scalpbot Services

Indicator engine, signal layer, risk levels and trade statistics.
Each service has a defined interface (contract) and implementation.
"""

from scalpbot.services.base import BaseService

__all__ = ["BaseService"]
