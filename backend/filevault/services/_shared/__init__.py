"""Primitives shared by every service: base class, errors and ports."""
