"""Pet Profiles API: pet profile records with images kept in object storage."""

__version__ = "0.1.0"
