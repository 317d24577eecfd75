"""
Burn tracker: polls a Solana wallet's transaction history, detects token
burns, and stores each burn exactly once with a per-run audit log.

Modular layout: solana_listener (RPC), analysis_engine (burn classifier),
agent_worker (batching and the run pipeline), database (store, reconciler,
run logger), api_server (read-only API).
"""

__version__ = "0.1.0"
