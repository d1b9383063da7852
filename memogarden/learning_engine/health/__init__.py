"""Three-tier retrievability cache: cards, decks, accounts."""
