"""Library for editing a band site's GitHub-hosted source files."""
