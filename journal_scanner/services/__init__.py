"""
Service layer for the journal scanner
"""
