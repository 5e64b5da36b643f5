"""Users, API keys, admin checks and usage logging."""
