"""Command line interface for driveupload."""
