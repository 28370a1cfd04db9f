"""Row mapping between the remote store and domain records."""
