"""Least-privilege role lookup service for Azure RBAC and Entra ID"""

__version__ = "1.0.0"
