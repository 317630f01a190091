"""Estimator configuration and estimation data models."""
