"""Plain-text reports: chat transcripts and filing summaries."""
