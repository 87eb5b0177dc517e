"""Exporters and HTTP host for rendered call graphs."""
