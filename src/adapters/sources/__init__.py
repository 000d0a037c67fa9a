"""Fuentes de registros (lectores concretos).

Por qué un paquete:
- Agrupa un módulo por tipo de entrada (texto local, query log, URL remota).
- Cada lector implementa `core.interfaces.source.RecordSource`.
"""

from adapters.sources.factory import build_source
from adapters.sources.local_text import LocalTextSource
from adapters.sources.previous_list import read_previous_domains
from adapters.sources.query_log import QueryLogSource
from adapters.sources.remote_text import RemoteTextSource

__all__ = [
	"LocalTextSource",
	"QueryLogSource",
	"RemoteTextSource",
	"build_source",
	"read_previous_domains",
]
