"""
Shared configuration and fixtures for module integration tests.

WARNING: These tests talk to the live 0x API and a live RPC node, and the
swap test executes a REAL transaction and spends REAL tokens!

Environment Variables:
    EVM_PRIVATE_KEY: Hex private key of the taker (required)
    ZEROX_API_KEY: 0x API key (required)
    EVM_RPC_URL: RPC endpoint URL (required)
    EVM_CHAIN_ID: Chain ID (default: 8453, Base)
    LIVE_SWAP: Set to "1" to allow tests that broadcast transactions
"""

import os
import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

# Load .env file
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

REQUIRED_ENV = ("EVM_PRIVATE_KEY", "ZEROX_API_KEY", "EVM_RPC_URL")


def skip_if_no_config():
    """Return a skip message if required config is missing, else None"""
    missing = [key for key in REQUIRED_ENV if not os.getenv(key)]
    if missing:
        return f"Missing required environment variables: {', '.join(missing)}"
    return None


def create_pipeline():
    """Create SwapPipeline from the environment"""
    from permit_swap.config import reload_config
    from permit_swap.modules import SwapPipeline

    return SwapPipeline.from_config(reload_config())


@pytest.fixture(scope="module")
def pipeline():
    """SwapPipeline fixture for live tests"""
    skip_msg = skip_if_no_config()
    if skip_msg:
        pytest.skip(skip_msg)
    pipeline = create_pipeline()
    yield pipeline
    pipeline.close()


@pytest.fixture
def live_swap_enabled():
    if os.getenv("LIVE_SWAP") != "1":
        pytest.skip("Set LIVE_SWAP=1 to broadcast real transactions")
