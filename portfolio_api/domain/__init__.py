"""Domain rules: errors, slugs and section content."""
