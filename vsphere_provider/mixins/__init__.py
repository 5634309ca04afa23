"""Shared functionality mixins for the provider client"""

from .vcenter_connection import VCenterConnectionMixin

__all__ = ['VCenterConnectionMixin']
