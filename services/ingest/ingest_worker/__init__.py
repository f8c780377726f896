"""Geospatial Ingest Worker - Service Bus job consumer."""
