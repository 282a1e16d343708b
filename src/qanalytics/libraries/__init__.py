"""Calculation libraries: risk analytics and corporate actions."""
