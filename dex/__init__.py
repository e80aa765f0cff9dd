"""
dex - Swap connectors and their registry.
"""
