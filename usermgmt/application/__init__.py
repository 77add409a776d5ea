"""
===============================================================================
APPLICATION LAYER
===============================================================================

Expone los puntos de entrada de la capa de aplicación:
  - usecases: registro, login y CRUD de usuarios gobernado por roles
  - dev_seed_users: seed de cuentas demo para entornos locales/test
===============================================================================
"""

from .dev_seed_users import SEED_ACCOUNTS, ensure_dev_users, seed_users

__all__ = ["SEED_ACCOUNTS", "ensure_dev_users", "seed_users"]
