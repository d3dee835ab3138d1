"""Configuration for intentgraph.

Settings are read once from the environment; a .env file is loaded if present.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Version stamped on every new graph document
SCHEMA_VERSION = os.getenv("INTENT_GRAPH_SCHEMA_VERSION", "1.0.0")

# Defaults for GraphConfig when the caller omits them
DEFAULT_EXECUTION_STRATEGY = os.getenv("INTENT_GRAPH_EXECUTION_STRATEGY", "sequential")
DEFAULT_ERROR_STRATEGY = os.getenv("INTENT_GRAPH_ERROR_STRATEGY", "fail")

# Export format used when export_graph is called without one
DEFAULT_EXPORT_FORMAT = os.getenv("INTENT_GRAPH_EXPORT_FORMAT", "json")

# Logging
LOG_LEVEL = os.getenv("INTENT_GRAPH_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("INTENT_GRAPH_LOG_JSON", "false").lower() == "true"

# Analysis thresholds
HIGH_COMPLEXITY_THRESHOLD = int(os.getenv("INTENT_GRAPH_HIGH_COMPLEXITY", "70"))
BOTTLENECK_DURATION_MS = float(os.getenv("INTENT_GRAPH_BOTTLENECK_DURATION_MS", "5000"))
BOTTLENECK_FAN_THRESHOLD = int(os.getenv("INTENT_GRAPH_BOTTLENECK_FAN", "3"))
