"""Clients for the remote Power BI control plane."""

from .powerbi import PowerBIClient

__all__ = ["PowerBIClient"]
