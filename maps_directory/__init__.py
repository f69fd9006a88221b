"""Searchable directory over category-partitioned point-of-interest datasets."""
