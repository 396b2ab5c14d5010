"""IdeaReel: turn a topic into a narrated, illustrated video timeline."""

__version__ = "0.1.0"
