"""Modelos y entidades del dominio.

Por qué:
- Aquí viven las estructuras de datos puras y estrictas (Pydantic v2) y los
  errores tipados de la capa REST.
- El dominio no conoce httpx ni la CLI: solo conceptos del problema.
"""
