"""Pintu Kerja: account moderation and job board backend."""

__version__ = "0.1.0"
