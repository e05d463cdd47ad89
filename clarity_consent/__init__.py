"""Consent layer for Microsoft Clarity.

Detects the Clarity project ID already configured on a site and
passes the configured consent to Clarity once it loads.
"""

__version__ = "2.0.1"
