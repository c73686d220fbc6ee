"""Catalog data and threshold configuration for the MindBot engine."""
