"""Core domain: chains, errors, conversation flows and command routing."""
