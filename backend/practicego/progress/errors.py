class InvalidActivityError(ValueError):
	"""Raised when an activity report carries negative points or an unknown achievement."""
