"""HTTP endpoints served alongside the bot."""
