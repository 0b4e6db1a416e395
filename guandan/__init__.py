"""Rules engine for GuanDan: cards, plays with wild cards, levels, tributes and game flow."""

__version__ = "0.1.0"