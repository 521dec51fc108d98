"""Cashi payment submission pipeline, API server and client."""
