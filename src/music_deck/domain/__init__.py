"""Domain layer: library, playback and theming."""
