"""Servicios del Core.

Por qué:
- Request Builder, intérprete de respuestas y resolución de rutas son puros.
- `vault_commands` es el único módulo que hace I/O (red + disco).
"""
