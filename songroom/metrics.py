from prometheus_client import Counter, Histogram

SPOTIFY_REQUESTS = Counter(
    "integration_spotify_requests_total",
    "Spotify requests",
    ["method", "path", "status"],
)

SPOTIFY_429 = Counter(
    "integration_spotify_rate_limited_total",
    "Spotify 429s",
    ["path"],
)

SPOTIFY_LATENCY = Histogram(
    "integration_spotify_latency_seconds",
    "Spotify latency",
    ["method", "path"],
)

# OAuth flow metrics
OAUTH_START = Counter(
    "oauth_start_total",
    "OAuth flow starts",
    ["provider"],
)

OAUTH_CALLBACK = Counter(
    "oauth_callback_total",
    "OAuth callback results",
    ["result", "reason"],
)

TOKEN_REFRESH_OPERATIONS = Counter(
    "token_refresh_operations_total",
    "Token refresh operations",
    ["provider", "result"],
)

GAME_SEED_TRACKS = Histogram(
    "game_seed_playable_tracks",
    "Playable tracks collected when seeding a room from a playlist",
    buckets=(0, 10, 25, 50, 100, 250, 500, 1000, 5000),
)
