"""
Directory Contact Crawler - core package

Collects contact records from a paginated, login-gated member directory
using a single interactive browser session.
"""

__version__ = "0.1.0"
