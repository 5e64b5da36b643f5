"""Design token extraction, languages, typography and profiles."""
