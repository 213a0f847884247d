"""Domain layer - business logic organized by feature.

Domains:
- playback: Per-session queue and transport state
- library: Songs, genres, uploads, and site stats
- rating: 1-5 star ratings
- playlists: User playlists
- accounts: User identity and admin checks
"""
