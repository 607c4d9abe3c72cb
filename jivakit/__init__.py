"""Jiva volume helpers: version checks, controller stats records, usage events and manifest builders."""

__version__ = "0.1.0"