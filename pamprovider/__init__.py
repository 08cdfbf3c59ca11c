"""
PAM Custom Provider

Azure Custom Provider endpoint that manages CyberArk Privilege Cloud safes
and accounts as ARM resources.
"""

__version__ = "0.1.0"
__author__ = "PAM Custom Provider Contributors"
