"""
Shared models and helpers for the journal scanner
"""
