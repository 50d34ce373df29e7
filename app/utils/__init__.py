"""
Utility modules for the Realtor Listing API.
"""

# Submodules are imported directly where needed to avoid circular imports
