"""
External integrations for VXA Ask.
"""
