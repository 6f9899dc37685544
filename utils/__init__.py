"""
Utils: angle geometry and drawing helpers.
"""
