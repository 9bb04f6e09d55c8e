"""Command execution, configuration and log helpers shared by the routes and the CLI."""
