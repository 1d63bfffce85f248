"""Universal profile scraper — attendee profiles from event-platform APIs."""

__version__ = "1.0.0"
