"""Flask gateway between the academy website and its backend API."""
