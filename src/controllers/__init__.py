"""HTTP route controllers."""
