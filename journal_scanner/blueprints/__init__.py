"""
HTTP blueprints for the journal scanner
"""
