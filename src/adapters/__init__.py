"""Adapters: HTTP, record sources, rendering and file output."""
