"""Infrastructure: persistence, remote guild adapter and activity log sink."""
