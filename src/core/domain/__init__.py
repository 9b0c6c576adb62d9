"""Modelos del dominio: payloads de la API de Metabase y estados del setup.

El dominio no conoce HTTP, CLI, ni settings: solo conceptos del problema.
"""
