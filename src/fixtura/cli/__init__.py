"""Command line interface for previewing and seeding fixtures."""
