"""
Security module - identity and session management
"""
