#!/usr/bin/env python3
"""
quicklogin - Saved login picker for web application login pages
Convenient entry point script in project root.
"""

import sys
import os

# Add src directory and project root to Python path
project_root = os.path.dirname(os.path.abspath(__file__))
src_path = os.path.join(project_root, 'src')
sys.path.insert(0, project_root)  # For the login_tools package
sys.path.insert(0, src_path)      # For src modules

# Import and run the CLI
from cli import main

if __name__ == '__main__':
    try:
        main()
    except KeyboardInterrupt:
        print("\n⚠️  Application interrupted by user")
        sys.exit(1)
