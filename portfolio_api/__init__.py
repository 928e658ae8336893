"""Identity and ownership-scoped content core for the portfolio platform."""

__version__ = "0.1.0"
