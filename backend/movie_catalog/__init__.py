"""Movie catalog viewer: TMDB listings, genre filters, pagination and a local watchlist."""

__version__ = "0.1.0"
