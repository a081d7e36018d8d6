"""A small content-addressed version control system with branches and three-way merges."""

__version__ = "0.1.0"