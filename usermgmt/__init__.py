"""usermgmt: API de gestión de usuarios multi-rol (Admin / Manager / User)."""

__version__ = "0.1.0"
