"""SQLAlchemy models, marshmallow schemas and the DBStorage store handle."""
