"""Minimal job board: listings and applications."""
