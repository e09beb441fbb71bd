"""Grid geometry, geodesy, configuration and mask files."""
