"""User interfaces for Music Deck."""
