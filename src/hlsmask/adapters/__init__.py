"""
Adapters - concrete implementations of external collaborators.
"""
