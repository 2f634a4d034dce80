"""Chess position representation, move generation, hashing and search data types."""

__version__ = "0.1.0"

__all__ = ["bitboard", "movegen", "position", "score", "search", "types", "zobrist"]