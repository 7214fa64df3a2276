"""Pydantic schemas: canvas records, KV envelopes, health."""
