"""Estimation services."""
