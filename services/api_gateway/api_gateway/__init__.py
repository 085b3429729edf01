"""Reverse-proxy gateway service with startup warmup of backend destinations."""

__version__ = "0.1.0"
