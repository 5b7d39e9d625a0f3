"""Church website: sermons, events and announcements with an admin panel."""
