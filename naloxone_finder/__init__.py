"""Naloxone Finder backend: AI-assisted search for nearby naloxone providers and events."""
