"""Catalog domain - products with their brands and types."""
