"""AWS components for bucketwire."""
