"""Quiz Reports: analytics reporting engine for quiz results."""
