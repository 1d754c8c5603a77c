"""REST API for the workflow sandbox."""
