"""Input models, photo fetching and errors for the report engine."""
