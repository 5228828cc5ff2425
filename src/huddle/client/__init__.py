"""Client-side consumers of the /ws event stream."""
