"""Core entities: character state, laws, policies, campaigns, treasury records."""
