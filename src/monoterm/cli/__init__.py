"""Command line front end for monoterm."""
