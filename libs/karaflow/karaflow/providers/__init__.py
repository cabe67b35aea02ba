"""Clients for the external processing backends."""

from karaflow.providers.registry import get_queue_client, get_transfer_client

__all__ = ["get_queue_client", "get_transfer_client"]
