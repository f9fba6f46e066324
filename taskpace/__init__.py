"""Adaptive progress forecasting and daily capacity allocation."""
