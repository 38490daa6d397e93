"""SQLAlchemy persistence: engine, models, repositories and unit of work."""
