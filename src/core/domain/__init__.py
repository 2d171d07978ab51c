"""Modelos del dominio del vault.

Por qué:
- Specs de comandos, formas de respuesta y outcomes (Pydantic v2 / dataclasses).
- El dominio no conoce la CLI ni el transporte: solo conceptos del vault.
"""
