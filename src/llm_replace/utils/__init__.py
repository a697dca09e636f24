"""Shared utilities (files, hashing, logging, retries)."""
