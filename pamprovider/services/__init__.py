"""Resource handlers for the custom provider resource types.

Subpackages: ``safes`` and ``accounts`` (the ARM resource types) and
``vault`` (the Privilege Cloud client they call).
"""
