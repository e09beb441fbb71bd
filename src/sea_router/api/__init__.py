"""HTTP surface for sea routing."""
