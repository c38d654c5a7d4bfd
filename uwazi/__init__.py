"""
Uwazi Proofs

Upload documents for a program, have them classified and read by an LLM,
evaluate eligibility against the program's rules and receive a verifiable
SHA-256 proof with a QR code.
"""

__version__ = "1.0.0"
__author__ = "Uwazi Proofs Team"
__description__ = "AI-assisted eligibility checks with verifiable proofs"
