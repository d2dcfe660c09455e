"""
Config — Settings loading and validation.
"""
