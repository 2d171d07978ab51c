"""Capa CLI (Typer + Rich).

Es la capa más externa: importa de `core` y `adapters`, nadie importa de `cli`.
"""
