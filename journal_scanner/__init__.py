"""
Journal Scanner - photograph a handwritten page, transcribe it and file it in Notion
"""
