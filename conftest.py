#!/usr/bin/env python3
"""
Root test configuration for coachgen
"""

import os
import sys
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# Set test environment variables
os.environ['TESTING'] = 'true'

# Keep a developer's real key out of the test runs
os.environ.pop('OPENAI_API_KEY', None)
