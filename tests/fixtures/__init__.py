"""Shared test payloads."""
