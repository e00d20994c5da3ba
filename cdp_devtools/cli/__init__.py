"""Command-line interface for cdp-devtools."""
