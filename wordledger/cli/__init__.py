"""Command line interface for wordledger."""
