"""vibedit: describe a video edit in plain words, get it done with ffmpeg."""

__version__ = "1.0.0"
