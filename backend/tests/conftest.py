"""Root conftest — shared test configuration."""

import os

# Tests run on in-memory stores; SQL tests build their own tmp_path databases
os.environ.setdefault("RECORD_STORE_BACKEND", "memory")
os.environ.setdefault("LOG_FORMAT", "text")
