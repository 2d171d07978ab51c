"""Core del cliente: dominio, configuración y lógica de request/response."""
