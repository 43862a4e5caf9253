"""
External data connectors
"""
