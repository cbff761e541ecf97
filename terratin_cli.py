#!/usr/bin/env python3
"""terratin Command-Line Interface"""
from terratin.cli.main import app

if __name__ == "__main__":
    app()
