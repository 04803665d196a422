# Domain Package
"""
Core entities and the contracts implemented by marketplace back ends.
"""
