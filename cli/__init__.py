"""
Command-line entry points.

Provides command-line interfaces for:
- Multi-symbol scans ranked by weighted score (cli.scan)
- Single-symbol indicator, QQE and ZigZag analysis (cli.analyze)
"""
