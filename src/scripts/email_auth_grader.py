#!/usr/bin/env python3
"""
email_auth_grader.py

Command-line entry point: grades the SPF, DKIM and DMARC records of a
domain and prints a scored report with one fix per section.

Usage:
    python email_auth_grader.py example.com
    python email_auth_grader.py example.com --quiet --json-out report.json
"""

from email_auth_grader.cli import main

if __name__ == "__main__":
    main()
