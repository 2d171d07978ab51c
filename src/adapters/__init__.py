"""Adaptadores de infraestructura (HTTP)."""
