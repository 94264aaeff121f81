"""Warranty record store and verification workflow service."""
