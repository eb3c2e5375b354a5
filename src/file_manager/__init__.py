"""
Configuration, object-store access and the file registry of the File Manager API.

Files are stored in an S3 bucket under generated keys; the user's filename is
kept in the ``original-filename`` object metadata.
"""
