"""Servicios del pipeline.

Por qué:
- Cada etapa (extracción, validación, normalización) es un módulo puro y pequeño.
- `build_pipeline` las conecta con fuentes y renderers.
"""
