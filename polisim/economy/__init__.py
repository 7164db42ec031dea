"""Macroeconomic indicator model and presentation helpers."""
