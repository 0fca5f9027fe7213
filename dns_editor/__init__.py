"""Declarative DNS record editor backed by the Cloudflare API."""
