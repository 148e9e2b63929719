#!/usr/bin/env python3
"""
Entry point for running dynamodb_local as a module.
This file enables: python -m dynamodb_local
"""

from .main import main

if __name__ == '__main__':
    main()
