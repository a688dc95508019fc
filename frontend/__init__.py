"""
HTTP surface for the Knowledge Base Assistant.
"""
