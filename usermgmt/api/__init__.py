"""Capa HTTP: routers FastAPI, DTOs y mapeo de errores a RFC7807."""
