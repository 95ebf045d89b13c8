"""Live browser tests against the demo site (run with --run-browser)."""
