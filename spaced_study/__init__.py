"""Spaced-repetition study engine with an async card store."""
