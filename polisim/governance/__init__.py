"""Legislative pipeline, policies, elections and government scoring."""
