"""Core building blocks of the note to Overleaf pipeline."""
