"""Offline tooling built on the interpreter tables."""
