"""
Shared configuration and utilities for report workflow tests.

Every test talks to an in-memory backend (tests/fake_api.py) through
httpx.MockTransport, so the suite needs no network and no credentials.
"""

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path

from report_workflow.config import ENV_SESSION_FILE

from .fake_api import FakeBackend

# Poll interval used by threaded tests (seconds)
FAST_INTERVAL = 0.01

# Upper bound for waiting on a background thread
THREAD_TIMEOUT = 2.0


def make_backend(*profiles, **kwargs):
    """FakeBackend with the given profiles' tokens registered."""
    backend = FakeBackend(**kwargs)
    for profile in profiles:
        profile.register(backend)
    return backend


@contextmanager
def temporary_session_file():
    """Point EDULEARN_SESSION_FILE at a throwaway file for the duration."""
    previous = os.environ.get(ENV_SESSION_FILE)
    with tempfile.TemporaryDirectory() as directory:
        path = Path(directory) / "session.json"
        os.environ[ENV_SESSION_FILE] = str(path)
        try:
            yield path
        finally:
            if previous is None:
                os.environ.pop(ENV_SESSION_FILE, None)
            else:
                os.environ[ENV_SESSION_FILE] = previous


# ============================================
# Logging Helpers
# ============================================

class Colors:
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    END = '\033[0m'


def log_pass(name):
    print(f"  {Colors.GREEN}✅ {name}{Colors.END}")


def log_fail(name, error):
    print(f"  {Colors.RED}❌ {name}: {error}{Colors.END}")


def log_skip(name, reason):
    print(f"  {Colors.YELLOW}⏭️  {name}: {reason}{Colors.END}")


def log_section(name):
    print(f"\n{Colors.BLUE}▶ {name}{Colors.END}")


def log_info(message):
    print(f"  {Colors.CYAN}ℹ️  {message}{Colors.END}")


@contextmanager
def cleared_env(*names):
    """Temporarily remove environment variables."""
    saved = {name: os.environ.pop(name) for name in names if name in os.environ}
    try:
        yield
    finally:
        os.environ.update(saved)
