"""Spotify-backed song rooms: account linking, playlist browsing and game seeding."""
