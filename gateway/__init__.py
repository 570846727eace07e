"""Boardbots browser gateway."""
