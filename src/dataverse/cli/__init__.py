"""Command line interface for dataverse."""
