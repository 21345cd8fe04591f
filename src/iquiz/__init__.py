"""Terminal quiz client for topic lists served as JSON."""
