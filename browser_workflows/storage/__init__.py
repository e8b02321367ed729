"""Storage layer: file naming and atomic JSON writes."""
