"""
Adapters layer (CLI and configuration)
"""
