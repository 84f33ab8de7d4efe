"""Version switching layer.

This package inspects the live installation, resolves version clues,
and orchestrates save-before-switch transitions.
"""
