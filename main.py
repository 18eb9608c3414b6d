#!/usr/bin/env python3
"""
Main entry point for the MoodTunes CLI
"""

import sys

from moodtunes.cli import main

if __name__ == "__main__":
    sys.exit(main())
