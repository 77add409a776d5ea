"""Infraestructura: pool PostgreSQL y repositorios concretos (Postgres / in-memory)."""
