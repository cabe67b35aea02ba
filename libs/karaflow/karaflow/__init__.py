"""Karaflow: karaoke artifact generation over remote separation and alignment queues."""

__version__ = "0.1.0"
