"""Trophy Mint - Steam achievement rarity views and on-chain achievement tokens."""

__version__ = "0.1.0"
