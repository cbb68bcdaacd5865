"""Obscura command line interface."""
