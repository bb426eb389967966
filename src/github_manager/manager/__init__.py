"""GitHub-facing components: API client, naming helpers, and the issue workflow."""
