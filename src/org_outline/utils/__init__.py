"""Shared utilities for org-outline."""
