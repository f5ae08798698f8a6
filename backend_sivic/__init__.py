"""
Backend Sivic: risk detection engine for Solana token mints and programs.

Classifies an address as a token mint or an executable program, runs the
matching 31-parameter detector against chain RPC and third-party data
providers, scores the findings and streams step-by-step progress to the
caller. Modular layout: solana_rpc and providers fetch, analysis_engine
scores, analytics detects, api_server streams.
"""

__version__ = "0.1.0"
