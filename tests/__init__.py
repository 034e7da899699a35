"""file-filter test suite."""
