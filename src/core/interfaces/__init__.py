"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos
  (constructor de endpoints, validación de certificados).
- Permite invertir dependencias: el cliente REST depende de abstracciones.
"""
