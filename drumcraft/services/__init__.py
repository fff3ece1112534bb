"""Audio sources and the listening loop."""
