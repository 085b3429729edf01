"""Startup warmup of reverse-proxy backend destinations."""
